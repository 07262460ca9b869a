from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, List, Optional

from ..config import AppConfig
from ..data.interface import PromotionTable
from ..data.models import Promotion, PromotionKind
from ..errors import DuplicateIdError, NotFoundError
from ..logging import get_logger

_PROMO_ID = re.compile(r"^PROMO(\d+)$")


class PromotionCatalog:
    """
    Owns the promotion collection and answers the two pricing queries.

    - Storage order is insertion order; it breaks ties between equal discounts.
    - Every mutation rewrites the whole table. A failed write raises
      PersistenceError after the in-memory change has already happened.
    - Callers get copies. Only an ``update`` mutator sees a stored promotion.
    """

    def __init__(self, table: PromotionTable, config: Optional[AppConfig] = None) -> None:
        self.table = table
        self.logger = get_logger(__name__, config)
        self._lock = threading.RLock()
        self._promotions: List[Promotion] = []

    def load(self) -> None:
        promotions = self.table.load()
        with self._lock:
            self._promotions = promotions

    def _persist(self) -> None:
        self.table.save(self._promotions)

    @contextmanager
    def locked(self):
        """Hold the catalog still across several queries."""
        with self._lock:
            yield self

    # ---------- pricing queries ----------

    def get_active_discount_for(self, item_id: str, now: datetime) -> Optional[Promotion]:
        """Deepest valid discount for the item; the first one wins a tie."""
        best: Optional[Promotion] = None
        with self._lock:
            for p in self._promotions:
                if p.kind != PromotionKind.DISCOUNT or not p.is_valid(now) or not p.is_applicable_to_item(item_id):
                    continue
                if best is None or p.discount_rate < best.discount_rate:
                    best = p
        return best.model_copy(deep=True) if best is not None else None

    def get_active_full_reductions(self, now: datetime) -> List[Promotion]:
        """Valid full reductions, ascending by threshold."""
        with self._lock:
            reductions = [
                p.model_copy(deep=True) for p in self._promotions
                if p.kind == PromotionKind.FULL_REDUCTION and p.is_valid(now)
            ]
        return sorted(reductions, key=lambda p: p.threshold_amount)

    def get_valid_promotions(self, now: datetime) -> List[Promotion]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._promotions if p.is_valid(now)]

    # ---------- CRUD ----------

    def list_promotions(self) -> List[Promotion]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._promotions]

    def _stored(self, promotion_id: str) -> Optional[Promotion]:
        for p in self._promotions:
            if p.promotion_id == promotion_id:
                return p
        return None

    def find_by_id(self, promotion_id: str) -> Optional[Promotion]:
        with self._lock:
            promotion = self._stored(promotion_id)
            return promotion.model_copy(deep=True) if promotion is not None else None

    def _require(self, promotion_id: str) -> Promotion:
        promotion = self._stored(promotion_id)
        if promotion is None:
            raise NotFoundError("Promotion", promotion_id)
        return promotion

    def add(self, promotion: Promotion) -> None:
        with self._lock:
            if self._stored(promotion.promotion_id) is not None:
                self.logger.warning(f"Rejected duplicate promotion id {promotion.promotion_id}")
                raise DuplicateIdError(promotion.promotion_id)
            self._promotions.append(promotion.model_copy(deep=True))
            self._persist()
        self.logger.info(f"Added promotion {promotion.promotion_id} ({promotion.display_tag()})")

    def remove(self, promotion_id: str) -> None:
        with self._lock:
            promotion = self._require(promotion_id)
            self._promotions.remove(promotion)
            self._persist()
        self.logger.info(f"Removed promotion {promotion_id}")

    def update(self, promotion_id: str, mutator: Callable[[Promotion], None]) -> Promotion:
        """Apply ``mutator`` to the stored promotion in place, then persist."""
        with self._lock:
            promotion = self._require(promotion_id)
            mutator(promotion)
            self._persist()
            snapshot = promotion.model_copy(deep=True)
        self.logger.info(f"Updated promotion {promotion_id}")
        return snapshot

    def set_active(self, promotion_id: str, active: bool) -> Promotion:
        def _apply(p: Promotion) -> None:
            p.active = active

        return self.update(promotion_id, _apply)

    def generate_id(self) -> str:
        """``PROMO`` + (highest numeric suffix + 1), at least three digits."""
        highest = 0
        with self._lock:
            for p in self._promotions:
                m = _PROMO_ID.match(p.promotion_id)
                if m:
                    highest = max(highest, int(m.group(1)))
        return f"PROMO{highest + 1:03d}"

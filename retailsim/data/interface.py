from __future__ import annotations

from typing import List, Optional, Protocol

from .models import Item, Order, Promotion


# ---- Persistence protocols ----

class PromotionTable(Protocol):
    """
    Durable home of the promotion collection.

    Every save rewrites the whole collection; there is no incremental append.
    """

    def load(self) -> List[Promotion]:
        """Read every persisted promotion, in storage order."""
        ...

    def save(self, promotions: List[Promotion]) -> None:
        """Replace the persisted collection. Raises PersistenceError."""
        ...


class OrderTable(Protocol):
    """Durable home of the order collection, rewritten in full on save."""

    def load(self) -> List[Order]:
        ...

    def save(self, orders: List[Order]) -> None:
        ...


# ---- Item catalog collaborator ----

class ItemRepository(Protocol):
    """
    Contract the order core needs from the item catalog.

    Implementations own their own persistence; ``save`` is called after
    stock is decremented for an order.
    """

    def list_items(self) -> List[Item]:
        ...

    def find_item_by_id(self, item_id: str) -> Optional[Item]:
        ...

    def get_stock(self, item_id: str) -> int:
        """Raises NotFoundError for an unknown item."""
        ...

    def set_stock(self, item_id: str, stock: int) -> None:
        ...

    def decrement_stock(self, item_id: str, quantity: int) -> None:
        ...

    def save(self) -> None:
        ...

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

ALL_ITEMS = "-1"


class PromotionKind(str, Enum):
    DISCOUNT = "DISCOUNT"
    FULL_REDUCTION = "FULL_REDUCTION"


class Promotion(BaseModel):
    """A single promotional rule.

    Only the field group matching ``kind`` is meaningful: discounts use
    ``target_item_id``/``discount_rate``, full reductions use
    ``threshold_amount``/``reduction_amount``. Values are assumed valid;
    administrator input is checked before a Promotion is built or edited.
    """
    promotion_id: str = Field(description="Unique promotion identifier")
    name: str = Field(description="Display name")
    kind: PromotionKind = Field(description="Type of promotion")
    active: bool = Field(default=True, description="Whether the promotion is enabled")
    valid_from: datetime = Field(description="Start of the validity window (inclusive)")
    valid_until: datetime = Field(description="End of the validity window (inclusive)")

    target_item_id: str = Field(default=ALL_ITEMS, description="Discounted item, '-1' for every item")
    discount_rate: float = Field(default=1.0, description="Price multiplier, e.g. 0.8")

    threshold_amount: float = Field(default=0.0, description="Spend needed to trigger the reduction")
    reduction_amount: float = Field(default=0.0, description="Amount taken off once the threshold is met")

    @classmethod
    def discount(
        cls,
        promotion_id: str,
        name: str,
        valid_from: datetime,
        valid_until: datetime,
        target_item_id: str,
        discount_rate: float,
        active: bool = True,
    ) -> "Promotion":
        return cls(
            promotion_id=promotion_id,
            name=name,
            kind=PromotionKind.DISCOUNT,
            active=active,
            valid_from=valid_from,
            valid_until=valid_until,
            target_item_id=target_item_id,
            discount_rate=discount_rate,
        )

    @classmethod
    def full_reduction(
        cls,
        promotion_id: str,
        name: str,
        valid_from: datetime,
        valid_until: datetime,
        threshold_amount: float,
        reduction_amount: float,
        active: bool = True,
    ) -> "Promotion":
        return cls(
            promotion_id=promotion_id,
            name=name,
            kind=PromotionKind.FULL_REDUCTION,
            active=active,
            valid_from=valid_from,
            valid_until=valid_until,
            threshold_amount=threshold_amount,
            reduction_amount=reduction_amount,
        )

    @property
    def is_discount(self) -> bool:
        return self.kind == PromotionKind.DISCOUNT

    @property
    def is_full_reduction(self) -> bool:
        return self.kind == PromotionKind.FULL_REDUCTION

    def is_valid(self, now: datetime) -> bool:
        return self.active and self.valid_from <= now <= self.valid_until

    def is_applicable_to_item(self, item_id: str) -> bool:
        if not self.is_discount:
            return False
        return self.target_item_id == ALL_ITEMS or self.target_item_id == item_id

    def price_after_discount(self, original_price: float) -> float:
        if not self.is_discount:
            return original_price
        return original_price * self.discount_rate

    def reduction_for(self, total_amount: float) -> float:
        if not self.is_full_reduction:
            return 0.0
        if total_amount >= self.threshold_amount:
            return self.reduction_amount
        return 0.0

    def display_tag(self) -> str:
        """Short label shown next to prices, e.g. ``8-tenths``."""
        if self.is_discount:
            return f"{int(self.discount_rate * 10)}-tenths"
        return f"reduction: spend >= {int(self.threshold_amount)}, save {int(self.reduction_amount)}"

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ItemDiscount(BaseModel):
    """Savings on one basket line."""
    item_name: str = Field(description="Name of the discounted item")
    amount: float = Field(description="Line original minus line discounted")


class PricingResult(BaseModel):
    """Outcome of applying promotions to a basket. Never persisted."""
    original_total: float = Field(default=0.0, description="Sum of unit price x quantity")
    after_discount_total: float = Field(default=0.0, description="Sum after per-item discounts")
    final_total: float = Field(default=0.0, description="Amount payable")
    total_savings: float = Field(default=0.0, description="original_total - final_total")
    total_reduction: float = Field(default=0.0, description="Sum of stacked full reductions")
    item_discounts: List[ItemDiscount] = Field(default_factory=list, description="Per-line discounts in basket order")
    discount_tags: List[str] = Field(default_factory=list, description="'<item> <tag>' per discounted line")
    reduction_tags: List[str] = Field(default_factory=list, description="Tags of the applied full reductions")

    @property
    def total_item_discount(self) -> float:
        return sum(d.amount for d in self.item_discounts)

    @property
    def applied_promotions(self) -> List[str]:
        """Every applied tag, discounts first."""
        return self.discount_tags + self.reduction_tags

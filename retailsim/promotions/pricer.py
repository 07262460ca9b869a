from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ..data.models import BasketLine, ItemDiscount, PricingResult
from .catalog import PromotionCatalog


class PromotionPricer:
    """
    Stateless basket pricing.

    Discounts are applied per line first. Every valid full reduction is then
    tested against the same after-discount subtotal, so all qualifying
    reductions stack. Nothing is rounded here; rounding is a display concern.
    """

    def calculate(
        self,
        basket: List[BasketLine],
        catalog: PromotionCatalog,
        now: Optional[datetime] = None,
    ) -> PricingResult:
        now = now or datetime.now()
        result = PricingResult()

        with catalog.locked():
            self._apply(basket, catalog, now, result)

        result.final_total = result.after_discount_total - result.total_reduction
        result.total_savings = result.original_total - result.final_total
        return result

    @staticmethod
    def _apply(basket: List[BasketLine], catalog: PromotionCatalog, now: datetime, result: PricingResult) -> None:
        for line in basket:
            item = line.item
            line_original = item.price * line.quantity
            result.original_total += line_original

            discount = catalog.get_active_discount_for(item.item_id, now)
            if discount is not None:
                line_discounted = discount.price_after_discount(item.price) * line.quantity
                result.item_discounts.append(
                    ItemDiscount(item_name=item.name, amount=line_original - line_discounted)
                )
                result.discount_tags.append(f"{item.name} {discount.display_tag()}")
            else:
                line_discounted = line_original
            result.after_discount_total += line_discounted

        for reduction in catalog.get_active_full_reductions(now):
            amount = reduction.reduction_for(result.after_discount_total)
            if amount > 0:
                result.total_reduction += amount
                result.reduction_tags.append(reduction.display_tag())

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, Field

from .config import AppConfig
from .data.interface import ItemRepository
from .data.models import ALL_ITEMS, BasketLine, OrderStatus, PricingResult, Promotion
from .errors import InsufficientStockError, InvalidInputError, NotFoundError, RetailSimError
from .logging import get_logger
from .orders.book import OrderBook
from .promotions.catalog import PromotionCatalog
from .promotions.pricer import PromotionPricer


class CommandResult(BaseModel):
    """What the console layer gets back from every command."""
    ok: bool = Field(description="Whether the command succeeded")
    message: str = Field(description="Human-readable outcome or failure reason")
    payload: Any = Field(default=None, description="Promotion, Order or list thereof")


class StockShortfall(BaseModel):
    """Failed order payload: the first basket line that could not be covered."""
    item_name: str = Field(description="Item that ran short")
    requested: int = Field(description="Quantity asked for across the basket")
    available: int = Field(description="Stock on hand")


def _run(logger, action: str, fn: Callable[[], CommandResult]) -> CommandResult:
    try:
        return fn()
    except RetailSimError as e:
        logger.warning(f"{action} failed: {e}")
        return CommandResult(ok=False, message=str(e))


# ---------- input validation ----------

def _require_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInputError("Name must not be empty")
    return name


def _require_finite(label: str, value: float) -> None:
    if not math.isfinite(value):
        raise InvalidInputError(f"{label} must be a finite number, got {value}")


def _require_rate(rate: float) -> float:
    _require_finite("Discount rate", rate)
    if not 0 < rate < 1:
        raise InvalidInputError(f"Discount rate must be between 0 and 1 (exclusive), got {rate}")
    return rate


def _require_days(days: int) -> int:
    if days <= 0:
        raise InvalidInputError(f"Validity must be a positive number of days, got {days}")
    return days


def _require_threshold_pair(threshold: float, reduction: float) -> None:
    _require_finite("Threshold", threshold)
    _require_finite("Reduction", reduction)
    if threshold <= 0:
        raise InvalidInputError(f"Threshold must be greater than 0, got {threshold}")
    if reduction <= 0:
        raise InvalidInputError(f"Reduction must be greater than 0, got {reduction}")
    if reduction >= threshold:
        raise InvalidInputError(f"Reduction ({reduction}) must be less than threshold ({threshold})")


class PromotionAdmin:
    """Administrator commands over the promotion catalog."""

    def __init__(
        self,
        catalog: PromotionCatalog,
        items: ItemRepository,
        config: Optional[AppConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.catalog = catalog
        self.items = items
        self.clock = clock
        self.logger = get_logger(__name__, config)

    def _target(self, target_item_id: str) -> str:
        target = (target_item_id or "").strip() or ALL_ITEMS
        if target != ALL_ITEMS and self.items.find_item_by_id(target) is None:
            raise InvalidInputError(f"Item does not exist: {target}")
        return target

    def _require(self, promotion_id: str) -> Promotion:
        promotion = self.catalog.find_by_id(promotion_id)
        if promotion is None:
            raise NotFoundError("Promotion", promotion_id)
        return promotion

    def _require_discount(self, promotion_id: str) -> Promotion:
        promotion = self._require(promotion_id)
        if not promotion.is_discount:
            raise InvalidInputError(f"Promotion {promotion_id} is not a discount")
        return promotion

    def _require_full_reduction(self, promotion_id: str) -> Promotion:
        promotion = self._require(promotion_id)
        if not promotion.is_full_reduction:
            raise InvalidInputError(f"Promotion {promotion_id} is not a full reduction")
        return promotion

    # ---------- creation ----------

    def add_discount(self, name: str, target_item_id: str, rate: float, days: int) -> CommandResult:
        def _add() -> CommandResult:
            now = self.clock()
            promotion_name = _require_name(name)
            target = self._target(target_item_id)
            _require_rate(rate)
            _require_days(days)
            with self.catalog.locked():
                promotion = Promotion.discount(
                    promotion_id=self.catalog.generate_id(),
                    name=promotion_name,
                    valid_from=now,
                    valid_until=now + timedelta(days=days),
                    target_item_id=target,
                    discount_rate=rate,
                )
                self.catalog.add(promotion)
            return CommandResult(ok=True, message=f"Discount {promotion.promotion_id} added", payload=promotion)

        return _run(self.logger, "add discount", _add)

    def add_full_reduction(self, name: str, threshold: float, reduction: float, days: int) -> CommandResult:
        def _add() -> CommandResult:
            now = self.clock()
            promotion_name = _require_name(name)
            _require_threshold_pair(threshold, reduction)
            _require_days(days)
            with self.catalog.locked():
                promotion = Promotion.full_reduction(
                    promotion_id=self.catalog.generate_id(),
                    name=promotion_name,
                    valid_from=now,
                    valid_until=now + timedelta(days=days),
                    threshold_amount=threshold,
                    reduction_amount=reduction,
                )
                self.catalog.add(promotion)
            return CommandResult(ok=True, message=f"Full reduction {promotion.promotion_id} added", payload=promotion)

        return _run(self.logger, "add full reduction", _add)

    # ---------- edits ----------

    def _edit(self, action: str, promotion_id: str, prepare: Callable[[], Callable[[Promotion], None]]) -> CommandResult:
        """``prepare`` validates the input and returns the in-place mutator."""
        def _apply() -> CommandResult:
            mutator = prepare()
            promotion = self.catalog.update(promotion_id, mutator)
            return CommandResult(ok=True, message=f"Promotion {promotion_id} updated", payload=promotion)

        return _run(self.logger, action, _apply)

    def rename(self, promotion_id: str, name: str) -> CommandResult:
        def _prepare():
            self._require(promotion_id)
            new_name = _require_name(name)

            def _set(p: Promotion) -> None:
                p.name = new_name
            return _set

        return self._edit("rename", promotion_id, _prepare)

    def set_validity(self, promotion_id: str, days: int) -> CommandResult:
        """Restart the window now and keep it open for ``days``."""
        def _prepare():
            self._require(promotion_id)
            _require_days(days)
            now = self.clock()

            def _set(p: Promotion) -> None:
                p.valid_from = now
                p.valid_until = now + timedelta(days=days)
            return _set

        return self._edit("set validity", promotion_id, _prepare)

    def set_discount_rate(self, promotion_id: str, rate: float) -> CommandResult:
        def _prepare():
            self._require_discount(promotion_id)
            _require_rate(rate)

            def _set(p: Promotion) -> None:
                p.discount_rate = rate
            return _set

        return self._edit("set discount rate", promotion_id, _prepare)

    def set_discount_target(self, promotion_id: str, target_item_id: str) -> CommandResult:
        def _prepare():
            self._require_discount(promotion_id)
            target = self._target(target_item_id)

            def _set(p: Promotion) -> None:
                p.target_item_id = target
            return _set

        return self._edit("set discount target", promotion_id, _prepare)

    def set_threshold(self, promotion_id: str, threshold: float) -> CommandResult:
        def _prepare():
            promotion = self._require_full_reduction(promotion_id)
            _require_threshold_pair(threshold, promotion.reduction_amount)

            def _set(p: Promotion) -> None:
                p.threshold_amount = threshold
            return _set

        return self._edit("set threshold", promotion_id, _prepare)

    def set_reduction(self, promotion_id: str, reduction: float) -> CommandResult:
        def _prepare():
            promotion = self._require_full_reduction(promotion_id)
            _require_threshold_pair(promotion.threshold_amount, reduction)

            def _set(p: Promotion) -> None:
                p.reduction_amount = reduction
            return _set

        return self._edit("set reduction", promotion_id, _prepare)

    def toggle_active(self, promotion_id: str) -> CommandResult:
        def _toggle() -> CommandResult:
            promotion = self._require(promotion_id)
            promotion = self.catalog.set_active(promotion_id, not promotion.active)
            state = "enabled" if promotion.active else "disabled"
            return CommandResult(ok=True, message=f"Promotion {promotion_id} {state}", payload=promotion)

        return _run(self.logger, "toggle active", _toggle)

    def delete(self, promotion_id: str) -> CommandResult:
        def _delete() -> CommandResult:
            self.catalog.remove(promotion_id)
            return CommandResult(ok=True, message=f"Promotion {promotion_id} deleted")

        return _run(self.logger, "delete", _delete)

    # ---------- listings ----------

    def list_all(self) -> CommandResult:
        promotions = self.catalog.list_promotions()
        return CommandResult(ok=True, message=f"{len(promotions)} promotions", payload=promotions)

    def list_valid(self) -> CommandResult:
        promotions = self.catalog.get_valid_promotions(self.clock())
        return CommandResult(ok=True, message=f"{len(promotions)} valid promotions", payload=promotions)


class OrderDesk:
    """Customer and administrator commands over orders."""

    def __init__(
        self,
        book: OrderBook,
        catalog: PromotionCatalog,
        pricer: Optional[PromotionPricer] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.book = book
        self.catalog = catalog
        self.pricer = pricer or PromotionPricer()
        self.logger = get_logger(__name__, config)

    def preview(self, basket: List[BasketLine]) -> PricingResult:
        """Price the basket for confirmation; nothing is reserved."""
        return self.pricer.calculate(basket, self.catalog, self.book.clock())

    def place_order(self, user_id: str, basket: List[BasketLine], shipping_address: str) -> CommandResult:
        def _place() -> CommandResult:
            if not basket:
                raise InvalidInputError("Basket is empty")
            address = (shipping_address or "").strip()
            if not address:
                raise InvalidInputError("Shipping address must not be empty")
            try:
                order = self.book.create(user_id, basket, address)
            except InsufficientStockError as e:
                self.logger.warning(f"place order failed: {e}")
                shortfall = StockShortfall(item_name=e.item_name, requested=e.requested, available=e.available)
                return CommandResult(ok=False, message=str(e), payload=shortfall)
            return CommandResult(ok=True, message=f"Order {order.order_id} created", payload=order)

        return _run(self.logger, "place order", _place)

    def find_order(self, order_id: str) -> CommandResult:
        order = self.book.find_by_id(order_id)
        if order is None:
            return CommandResult(ok=False, message=f"Order not found: {order_id}")
        return CommandResult(ok=True, message=f"Order {order_id}: {order.status.label}", payload=order)

    def orders_for_user(self, user_id: str) -> CommandResult:
        orders = self.book.find_by_user(user_id)
        return CommandResult(ok=True, message=f"{len(orders)} orders for {user_id}", payload=orders)

    def all_orders(self) -> CommandResult:
        orders = self.book.list_orders()
        return CommandResult(ok=True, message=f"{len(orders)} orders", payload=orders)

    def set_status(self, order_id: str, status: Union[str, OrderStatus]) -> CommandResult:
        def _set() -> CommandResult:
            try:
                new_status = status if isinstance(status, OrderStatus) else OrderStatus.parse(status)
            except ValueError as e:
                raise InvalidInputError(str(e)) from e
            order = self.book.set_status(order_id, new_status)
            return CommandResult(ok=True, message=f"Order {order_id} is now {new_status.label}", payload=order)

        return _run(self.logger, "set order status", _set)

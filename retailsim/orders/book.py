from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..config import AppConfig
from ..data.interface import ItemRepository, OrderTable
from ..data.models import BasketLine, Order, OrderItem, OrderStatus, generate_order_id
from ..errors import InsufficientStockError, NotFoundError
from ..logging import get_logger
from .scheduler import OrderStatusScheduler


class OrderBook:
    """
    Owns the order collection, its persistence and the status scheduler.

    One re-entrant lock covers every read, every mutation and the table
    write that follows it, so readers never see a change that is in memory
    but not yet on disk. Callers get copies, never the stored orders.
    """

    def __init__(
        self,
        table: OrderTable,
        items: ItemRepository,
        config: AppConfig,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.table = table
        self.items = items
        self.config = config
        self.clock = clock
        self.logger = get_logger(__name__, config)
        self._lock = threading.RLock()
        self._orders: List[Order] = []
        self._dwell_seconds: Dict[OrderStatus, int] = {
            OrderStatus.PENDING: config.pending_to_shipped_seconds,
            OrderStatus.SHIPPED: config.shipped_to_delivered_seconds,
        }
        self._scheduler = OrderStatusScheduler(self, config)

    def load(self) -> None:
        orders = self.table.load()
        with self._lock:
            self._orders = orders

    def _persist(self) -> None:
        self.table.save(self._orders)

    # ---------- creation ----------

    def _check_stock(self, basket: List[BasketLine]) -> None:
        """Whole-basket check before anything is decremented."""
        requested: Dict[str, int] = {}
        for line in basket:
            item_id = line.item.item_id
            requested[item_id] = requested.get(item_id, 0) + line.quantity
            available = self.items.get_stock(item_id)
            if requested[item_id] > available:
                self.logger.warning(
                    f"Insufficient stock for {line.item.name}: requested={requested[item_id]}, available={available}"
                )
                raise InsufficientStockError(line.item.name, requested[item_id], available)

    def _unique_order_id(self, user_id: str, created_at: datetime) -> str:
        existing = {o.order_id for o in self._orders}
        order_id = generate_order_id(user_id, created_at)
        salt = 0
        while order_id in existing:
            salt += 1
            self.logger.warning(f"Order id collision on {order_id}, regenerating with salt {salt}")
            order_id = generate_order_id(user_id, created_at, salt)
        return order_id

    def create(self, user_id: str, basket: List[BasketLine], shipping_address: str) -> Order:
        """Check stock for the whole basket, then commit order and decrements together.

        Raises InsufficientStockError (nothing changed) or PersistenceError.
        """
        with self._lock:
            self._check_stock(basket)

            now = self.clock()
            items = [
                OrderItem(
                    item_id=line.item.item_id,
                    item_name=line.item.name,
                    unit_price=line.item.price,
                    quantity=line.quantity,
                )
                for line in basket
            ]
            order = Order(
                order_id=self._unique_order_id(user_id, now),
                user_id=user_id,
                items=items,
                created_at=now,
                total_amount=sum(it.unit_price * it.quantity for it in items),
                shipping_address=shipping_address,
                status=OrderStatus.PENDING,
                status_changed_at=now,
            )

            for line in basket:
                self.items.decrement_stock(line.item.item_id, line.quantity)
            self._orders.append(order)
            self._persist()
            self.items.save()

        self.logger.info(f"Created order {order.order_id} for {user_id}: {len(items)} lines, total={order.total_amount:.2f}")
        return order.model_copy(deep=True)

    # ---------- queries ----------

    def find_by_id(self, order_id: str) -> Optional[Order]:
        with self._lock:
            for o in self._orders:
                if o.order_id == order_id:
                    return o.model_copy(deep=True)
        return None

    def find_by_user(self, user_id: str) -> List[Order]:
        with self._lock:
            return [o.model_copy(deep=True) for o in self._orders if o.user_id == user_id]

    def list_orders(self) -> List[Order]:
        with self._lock:
            return [o.model_copy(deep=True) for o in self._orders]

    # ---------- status changes ----------

    def set_status(self, order_id: str, new_status: OrderStatus) -> Order:
        """Force a status; any target is allowed for administrator overrides."""
        with self._lock:
            order = next((o for o in self._orders if o.order_id == order_id), None)
            if order is None:
                raise NotFoundError("Order", order_id)
            previous = order.status
            order.set_status(new_status, max(self.clock(), order.status_changed_at))
            self._persist()
            snapshot = order.model_copy(deep=True)
        self.logger.info(f"Order {order_id}: {previous.value} -> {new_status.value}")
        return snapshot

    def advance_statuses(self, now: Optional[datetime] = None) -> List[str]:
        """One scheduler scan. Persists once if any order moved; returns the moved ids."""
        moved: List[str] = []
        with self._lock:
            now = now or self.clock()
            for order in self._orders:
                target = order.status.next()
                if target is None or order.seconds_in_status(now) < self._dwell_seconds[order.status]:
                    continue
                order.set_status(target, now)
                moved.append(order.order_id)
            if moved:
                self._persist()
        return moved

    # ---------- scheduler lifecycle ----------

    @property
    def scheduler(self) -> OrderStatusScheduler:
        return self._scheduler

    def start_scheduler(self) -> None:
        self._scheduler.start()

    def stop_scheduler(self) -> bool:
        return self._scheduler.stop()

    def close(self) -> bool:
        """Stop the scheduler before the book and its table go away.

        Returns False if the scheduler thread outlived its join timeout; it may
        still write orders.csv after this returns.
        """
        stopped = self.stop_scheduler()
        if not stopped:
            self.logger.error("Order book closed while the status scheduler is still running")
        return stopped

    def __enter__(self) -> "OrderBook":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

from __future__ import annotations

import hashlib
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def next(self) -> Optional["OrderStatus"]:
        """Following lifecycle state, None once delivered."""
        if self is OrderStatus.PENDING:
            return OrderStatus.SHIPPED
        if self is OrderStatus.SHIPPED:
            return OrderStatus.DELIVERED
        return None

    @classmethod
    def parse(cls, text: str) -> "OrderStatus":
        """Accept both stored values (``SHIPPED``) and labels (``Shipped``)."""
        try:
            return cls(text.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown order status: {text!r}") from None


class OrderItem(BaseModel):
    """One purchased line, frozen at purchase time."""
    item_id: str = Field(description="Item identifier")
    item_name: str = Field(description="Item name at purchase time")
    unit_price: float = Field(description="Unit price at time of order")
    quantity: int = Field(description="Quantity ordered")

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity


class Order(BaseModel):
    """A completed purchase. Only status and status_changed_at ever change."""
    order_id: str = Field(description="Unique order identifier")
    user_id: str = Field(description="Customer who placed the order")
    items: List[OrderItem] = Field(default_factory=list, description="Purchased lines")
    created_at: datetime = Field(description="Order timestamp")
    total_amount: float = Field(description="Sum of unit_price x quantity, before promotions")
    shipping_address: str = Field(description="Delivery address")
    status: OrderStatus = Field(default=OrderStatus.PENDING, description="Lifecycle status")
    status_changed_at: datetime = Field(description="Time of the latest status change")

    def set_status(self, new_status: OrderStatus, at: datetime) -> None:
        self.status = new_status
        self.status_changed_at = at

    def seconds_in_status(self, now: datetime) -> float:
        return (now - self.status_changed_at).total_seconds()


def generate_order_id(user_id: str, created_at: datetime, salt: int = 0) -> str:
    """``ORD`` + 16 digits hashed from the user and creation second."""
    seed = f"{user_id}_{int(created_at.timestamp())}"
    if salt:
        seed = f"{seed}_{salt}"
    digest = int(hashlib.sha256(seed.encode("utf-8")).hexdigest(), 16)
    return f"ORD{digest % 10 ** 16:016d}"

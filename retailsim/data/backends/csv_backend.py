from __future__ import annotations

import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ...config import AppConfig
from ...errors import NotFoundError, PersistenceError
from ...logging import get_logger
from ..interface import ItemRepository, OrderTable, PromotionTable
from ..models import Item, Order, OrderItem, OrderStatus, Promotion, PromotionKind


PROMOTION_COLUMNS = [
    "promotion_id", "promotion_name", "promotion_type", "is_active", "start_time", "end_time",
    "target_item_id", "discount_rate", "threshold_amount", "reduction_amount",
]
ORDER_COLUMNS = [
    "order_id", "user_id", "items", "order_time", "total_amount",
    "shipping_address", "status", "status_change_time",
]
ITEM_COLUMNS = ["item_id", "item_name", "category", "price", "description", "stock"]


# ---------- table IO helpers ----------

def read_table(path: Path, columns: List[str]) -> pd.DataFrame:
    """Read a CSV as strings; a missing or empty file is an empty table."""
    if not path.exists():
        return pd.DataFrame(columns=columns)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=columns)
    except Exception as e:
        raise PersistenceError(path, e) from e

    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise PersistenceError(path, ValueError(f"missing columns: {', '.join(missing)}"))
    return df


def write_table(path: Path, rows: Iterable[Dict], columns: List[str]) -> None:
    """Rewrite the whole table: write a sibling temp file, then swap it in."""
    df = pd.DataFrame(list(rows), columns=columns)
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(tmp, index=False)
        os.replace(tmp, path)
    except Exception as e:
        raise PersistenceError(path, e) from e


# ---------- order item sub-list codec ----------

def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace(":", "\\:").replace(";", "\\;")


def encode_order_items(items: List[OrderItem]) -> str:
    """``id:name:price:qty`` entries joined by ``;``."""
    return ";".join(
        f"{_escape(it.item_id)}:{_escape(it.item_name)}:{it.unit_price!r}:{it.quantity}"
        for it in items
    )


def decode_order_items(text: str) -> List[OrderItem]:
    entries: List[List[str]] = []
    fields: List[str] = []
    buf: List[str] = []
    chars = iter(text)
    for ch in chars:
        if ch == "\\":
            buf.append(next(chars, ""))
        elif ch == ":":
            fields.append("".join(buf))
            buf = []
        elif ch == ";":
            fields.append("".join(buf))
            buf = []
            entries.append(fields)
            fields = []
        else:
            buf.append(ch)
    if buf or fields:
        fields.append("".join(buf))
        entries.append(fields)

    items = []
    for entry in entries:
        if len(entry) != 4:
            raise ValueError(f"malformed order item entry: {entry!r}")
        item_id, name, price, quantity = entry
        items.append(OrderItem(item_id=item_id, item_name=name, unit_price=float(price), quantity=int(quantity)))
    return items


# ---------- row conversion ----------

def _float_or(value: str, default: float) -> float:
    return float(value) if value.strip() else default


def promotion_to_row(p: Promotion) -> Dict:
    row = {
        "promotion_id": p.promotion_id,
        "promotion_name": p.name,
        "promotion_type": p.kind.value,
        "is_active": "1" if p.active else "0",
        "start_time": p.valid_from.isoformat(),
        "end_time": p.valid_until.isoformat(),
        "target_item_id": "",
        "discount_rate": "",
        "threshold_amount": "",
        "reduction_amount": "",
    }
    if p.is_discount:
        row["target_item_id"] = p.target_item_id
        row["discount_rate"] = repr(p.discount_rate)
    else:
        row["threshold_amount"] = repr(p.threshold_amount)
        row["reduction_amount"] = repr(p.reduction_amount)
    return row


def row_to_promotion(row: Dict) -> Promotion:
    kind = PromotionKind(row["promotion_type"].strip().upper())
    common = dict(
        promotion_id=row["promotion_id"],
        name=row["promotion_name"],
        active=row["is_active"].strip().lower() in ("1", "true"),
        valid_from=datetime.fromisoformat(row["start_time"]),
        valid_until=datetime.fromisoformat(row["end_time"]),
    )
    if kind == PromotionKind.DISCOUNT:
        return Promotion.discount(
            target_item_id=row["target_item_id"],
            discount_rate=_float_or(row["discount_rate"], 1.0),
            **common,
        )
    return Promotion.full_reduction(
        threshold_amount=_float_or(row["threshold_amount"], 0.0),
        reduction_amount=_float_or(row["reduction_amount"], 0.0),
        **common,
    )


def order_to_row(o: Order) -> Dict:
    return {
        "order_id": o.order_id,
        "user_id": o.user_id,
        "items": encode_order_items(o.items),
        "order_time": o.created_at.isoformat(),
        "total_amount": repr(o.total_amount),
        "shipping_address": o.shipping_address,
        "status": o.status.value,
        "status_change_time": o.status_changed_at.isoformat(),
    }


def row_to_order(row: Dict) -> Order:
    return Order(
        order_id=row["order_id"],
        user_id=row["user_id"],
        items=decode_order_items(row["items"]),
        created_at=datetime.fromisoformat(row["order_time"]),
        total_amount=float(row["total_amount"]),
        shipping_address=row["shipping_address"],
        status=OrderStatus.parse(row["status"]),
        status_changed_at=datetime.fromisoformat(row["status_change_time"]),
    )


def item_to_row(it: Item) -> Dict:
    return {
        "item_id": it.item_id,
        "item_name": it.name,
        "category": it.category,
        "price": repr(it.price),
        "description": it.description,
        "stock": it.stock,
    }


# ---------- tables ----------

class CsvPromotionTable(PromotionTable):
    """promotions.csv; rows with an unknown type or bad values are skipped on load."""

    def __init__(self, path: str | Path, config: Optional[AppConfig] = None) -> None:
        self.path = Path(path)
        self.logger = get_logger(__name__, config)

    def load(self) -> List[Promotion]:
        df = read_table(self.path, PROMOTION_COLUMNS)
        promotions: List[Promotion] = []
        for row in df.to_dict(orient="records"):
            try:
                promotions.append(row_to_promotion(row))
            except ValueError as e:
                self.logger.warning(f"Skipping malformed promotion row {row.get('promotion_id')!r}: {e}")
        self.logger.info(f"Loaded {len(promotions)} promotions from {self.path}")
        return promotions

    def save(self, promotions: List[Promotion]) -> None:
        write_table(self.path, (promotion_to_row(p) for p in promotions), PROMOTION_COLUMNS)


class CsvOrderTable(OrderTable):
    """orders.csv; malformed rows are skipped on load."""

    def __init__(self, path: str | Path, config: Optional[AppConfig] = None) -> None:
        self.path = Path(path)
        self.logger = get_logger(__name__, config)

    def load(self) -> List[Order]:
        df = read_table(self.path, ORDER_COLUMNS)
        orders: List[Order] = []
        for row in df.to_dict(orient="records"):
            try:
                orders.append(row_to_order(row))
            except ValueError as e:
                self.logger.warning(f"Skipping malformed order row {row.get('order_id')!r}: {e}")
        self.logger.info(f"Loaded {len(orders)} orders from {self.path}")
        return orders

    def save(self, orders: List[Order]) -> None:
        write_table(self.path, (order_to_row(o) for o in orders), ORDER_COLUMNS)


class CsvItemRepository(ItemRepository):
    """
    items.csv-backed item catalog.
    - Loads the file once at construction (missing file = empty catalog).
    - Returns live Item instances, so stock changes are visible to holders.
    """

    def __init__(self, path: str | Path, config: Optional[AppConfig] = None) -> None:
        self.path = Path(path)
        self.logger = get_logger(__name__, config)
        self._lock = threading.RLock()
        self._items: Dict[str, Item] = {}
        self.load()

    def load(self) -> None:
        df = read_table(self.path, ITEM_COLUMNS)
        items: Dict[str, Item] = {}
        for row in df.to_dict(orient="records"):
            try:
                items[row["item_id"]] = Item(
                    item_id=row["item_id"],
                    name=row["item_name"],
                    category=row["category"],
                    price=float(row["price"]),
                    description=row["description"],
                    stock=int(row["stock"]),
                )
            except ValueError as e:
                self.logger.warning(f"Skipping malformed item row {row.get('item_id')!r}: {e}")
        with self._lock:
            self._items = items

    def save(self) -> None:
        with self._lock:
            write_table(self.path, [item_to_row(it) for it in self._items.values()], ITEM_COLUMNS)

    def add_item(self, item: Item) -> None:
        with self._lock:
            self._items[item.item_id] = item
            self.save()

    def list_items(self) -> List[Item]:
        with self._lock:
            return list(self._items.values())

    def find_item_by_id(self, item_id: str) -> Optional[Item]:
        with self._lock:
            return self._items.get(item_id)

    def _require(self, item_id: str) -> Item:
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item

    def get_stock(self, item_id: str) -> int:
        with self._lock:
            return self._require(item_id).stock

    def set_stock(self, item_id: str, stock: int) -> None:
        with self._lock:
            self._require(item_id).stock = stock

    def decrement_stock(self, item_id: str, quantity: int) -> None:
        with self._lock:
            item = self._require(item_id)
            item.stock -= quantity

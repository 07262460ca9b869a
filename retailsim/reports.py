from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config import AppConfig
from .data.interface import ItemRepository
from .data.models import Order
from .data.util import resolve_data_dir
from .errors import PersistenceError
from .logging import get_logger
from .orders.book import OrderBook

UNKNOWN_CATEGORY = "Unknown"
CATEGORY_COLUMNS = ["category", "total_amount", "frequency"]
ITEM_COLUMNS = ["item_id", "item_name", "category", "total_amount", "quantity", "frequency"]
REPORT_COLUMNS = ["section", "key", "item_name", "category", "total_amount", "quantity", "frequency"]


@dataclass
class CustomerReport:
    user_id: str
    order_count: int
    total_spent: float
    categories: pd.DataFrame  # CATEGORY_COLUMNS, highest spend first
    items: pd.DataFrame       # ITEM_COLUMNS, highest spend first


class CustomerReportService:
    """
    Purchase statistics for one customer.

    Frequency counts distinct orders, so buying an item on two lines of the
    same order counts once. Categories come from the live item catalog.
    """

    def __init__(self, book: OrderBook, items: ItemRepository, config: AppConfig) -> None:
        self.book = book
        self.items = items
        self.reports_dir = resolve_data_dir(config.reports_dir)
        self.logger = get_logger(__name__, config)

    def _lines(self, orders: List[Order]) -> pd.DataFrame:
        rows = []
        for order in orders:
            for it in order.items:
                item = self.items.find_item_by_id(it.item_id)
                rows.append({
                    "order_id": order.order_id,
                    "item_id": it.item_id,
                    "item_name": it.item_name,
                    "category": item.category if item is not None and item.category else UNKNOWN_CATEGORY,
                    "amount": it.unit_price * it.quantity,
                    "quantity": it.quantity,
                })
        return pd.DataFrame(rows, columns=["order_id", "item_id", "item_name", "category", "amount", "quantity"])

    def analyze(self, orders: List[Order]) -> tuple[pd.DataFrame, pd.DataFrame]:
        lines = self._lines(orders)
        if lines.empty:
            return pd.DataFrame(columns=CATEGORY_COLUMNS), pd.DataFrame(columns=ITEM_COLUMNS)

        categories = (
            lines.groupby("category", as_index=False)
                 .agg(total_amount=("amount", "sum"), frequency=("order_id", "nunique"))
                 .sort_values("total_amount", ascending=False)
                 .reset_index(drop=True)
        )
        items = (
            lines.groupby(["item_id", "item_name", "category"], as_index=False)
                 .agg(total_amount=("amount", "sum"), quantity=("quantity", "sum"), frequency=("order_id", "nunique"))
                 .sort_values("total_amount", ascending=False)
                 .reset_index(drop=True)
        )
        return categories[CATEGORY_COLUMNS], items[ITEM_COLUMNS]

    def build_report(self, user_id: str) -> CustomerReport:
        orders = self.book.find_by_user(user_id)
        categories, items = self.analyze(orders)
        return CustomerReport(
            user_id=user_id,
            order_count=len(orders),
            total_spent=sum(o.total_amount for o in orders),
            categories=categories,
            items=items,
        )

    def write_report(self, report: CustomerReport, output_dir: Optional[Path] = None, today: Optional[date] = None) -> Path:
        """Write ``{user}_report_{YYYYMMDD}.csv`` with category rows then item rows."""
        output_dir = Path(output_dir) if output_dir is not None else self.reports_dir
        today = today or date.today()
        path = output_dir / f"{report.user_id}_report_{today:%Y%m%d}.csv"

        category_rows = report.categories.rename(columns={"category": "key"}).assign(
            section="category", item_name="", category="", quantity=""
        )
        item_rows = report.items.rename(columns={"item_id": "key"}).assign(section="item")
        frame = pd.concat([category_rows, item_rows], ignore_index=True)[REPORT_COLUMNS]

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            frame.to_csv(path, index=False)
        except OSError as e:
            raise PersistenceError(path, e) from e
        self.logger.info(f"Wrote report for {report.user_id} to {path}")
        return path

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from ..config import AppConfig
from .backends.csv_backend import CsvItemRepository, CsvOrderTable, CsvPromotionTable
from .interface import ItemRepository, OrderTable, PromotionTable


@dataclass
class DataStores:
    items: ItemRepository
    promotions: PromotionTable
    orders: OrderTable


def resolve_data_dir(data_dir: str | Path) -> Path:
    """Absolute paths are kept; relative ones hang off the repository root."""
    path = Path(data_dir)
    if path.is_absolute():
        return path

    current = Path.cwd()
    # Look up the directory tree for the project's pyproject.toml
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent / path
    return current / path


def get_data_stores(config: AppConfig, kind: Literal["csv"] = "csv") -> DataStores:
    if kind == "csv":
        data_dir = resolve_data_dir(config.data_dir)
        return DataStores(
            items=CsvItemRepository(data_dir / config.items_file, config),
            promotions=CsvPromotionTable(data_dir / config.promotions_file, config),
            orders=CsvOrderTable(data_dir / config.orders_file, config),
        )
    raise ValueError(f"Unknown data store kind: {kind}")

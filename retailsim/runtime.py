from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .commands import OrderDesk, PromotionAdmin
from .config import AppConfig, load_config
from .data.util import DataStores, get_data_stores
from .logging import get_logger
from .orders.book import OrderBook
from .promotions.catalog import PromotionCatalog
from .promotions.pricer import PromotionPricer
from .reports import CustomerReportService


@dataclass
class Storefront:
    """Everything one running store needs, built from a single AppConfig."""
    config: AppConfig
    stores: DataStores
    catalog: PromotionCatalog
    book: OrderBook
    pricer: PromotionPricer
    admin: PromotionAdmin
    desk: OrderDesk
    reports: CustomerReportService

    def close(self) -> bool:
        return self.book.close()

    def __enter__(self) -> "Storefront":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def bootstrap(
    config: Optional[AppConfig] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> Storefront:
    """Load items, promotions and orders, and start the scheduler if enabled."""
    config = config or load_config()
    logger = get_logger(__name__, config)

    stores = get_data_stores(config)
    catalog = PromotionCatalog(stores.promotions, config)
    catalog.load()
    book = OrderBook(stores.orders, stores.items, config, clock=clock)
    book.load()
    pricer = PromotionPricer()

    front = Storefront(
        config=config,
        stores=stores,
        catalog=catalog,
        book=book,
        pricer=pricer,
        admin=PromotionAdmin(catalog, stores.items, config, clock=clock),
        desk=OrderDesk(book, catalog, pricer, config),
        reports=CustomerReportService(book, stores.items, config),
    )
    logger.info(
        f"Loaded {len(stores.items.list_items())} items, {len(catalog.list_promotions())} promotions, "
        f"{len(book.list_orders())} orders from {config.data_dir}"
    )

    if config.auto_update_enabled:
        book.start_scheduler()
    return front

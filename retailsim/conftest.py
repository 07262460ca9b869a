from datetime import datetime, timedelta

import pytest

from retailsim.config import load_config
from retailsim.data.backends.csv_backend import CsvItemRepository, CsvOrderTable, CsvPromotionTable
from retailsim.data.models import Item
from retailsim.orders.book import OrderBook
from retailsim.promotions.catalog import PromotionCatalog

NOW = datetime(2024, 5, 1, 12, 0, 0)


class FakeClock:
    """Settable clock handed to services in place of datetime.now."""
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def config(tmp_path):
    return load_config(
        env_file=None,
        data_dir=str(tmp_path),
        reports_dir=str(tmp_path / "reports"),
        log_level="WARNING",
        scheduler_poll_interval_seconds=0.01,
        scheduler_join_timeout_seconds=2.0,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def items(config, tmp_path):
    repo = CsvItemRepository(tmp_path / config.items_file, config)
    for item in [
        Item(item_id="1", name="Headphones", category="Electronics", price=100.0, stock=10),
        Item(item_id="2", name="Novel", category="Books", price=50.0, stock=5),
        Item(item_id="3", name="Mug", category="Home", price=20.0, stock=2),
    ]:
        repo.add_item(item)
    return repo


@pytest.fixture
def catalog(config, tmp_path):
    catalog = PromotionCatalog(CsvPromotionTable(tmp_path / config.promotions_file, config), config)
    catalog.load()
    return catalog


@pytest.fixture
def book(config, items, clock, tmp_path):
    book = OrderBook(CsvOrderTable(tmp_path / config.orders_file, config), items, config, clock=clock)
    book.load()
    yield book
    book.close()

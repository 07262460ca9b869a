from datetime import datetime

import pandas as pd
import pytest

from retailsim.data.backends.csv_backend import (
    ORDER_COLUMNS,
    PROMOTION_COLUMNS,
    CsvItemRepository,
    CsvOrderTable,
    CsvPromotionTable,
    decode_order_items,
    encode_order_items,
    read_table,
    write_table,
)
from retailsim.data.models import Order, OrderItem, OrderStatus, Promotion
from retailsim.errors import NotFoundError, PersistenceError

START = datetime(2024, 5, 1, 9, 30)
END = datetime(2024, 5, 31, 23, 59)


def test_missing_file_loads_as_empty(tmp_path, config):
    assert CsvPromotionTable(tmp_path / "nope.csv", config).load() == []
    assert CsvOrderTable(tmp_path / "nope.csv", config).load() == []
    assert CsvItemRepository(tmp_path / "nope.csv", config).list_items() == []


def test_missing_columns_raise_persistence_error(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("promotion_id,promotion_name\nPROMO001,Sale\n")
    with pytest.raises(PersistenceError):
        read_table(path, PROMOTION_COLUMNS)


def test_write_table_replaces_file_and_leaves_no_temp(tmp_path):
    path = tmp_path / "t.csv"
    write_table(path, [{"a": "1", "b": "x"}], ["a", "b"])
    write_table(path, [{"a": "2", "b": "y"}], ["a", "b"])
    df = pd.read_csv(path, dtype=str)
    assert df.to_dict(orient="records") == [{"a": "2", "b": "y"}]
    assert [p.name for p in tmp_path.iterdir()] == ["t.csv"]


def test_order_items_codec_escapes_separators():
    items = [
        OrderItem(item_id="1", item_name="Cable: USB-C; 2m", unit_price=9.99, quantity=3),
        OrderItem(item_id="2", item_name="Back\\slash", unit_price=0.1, quantity=1),
    ]
    text = encode_order_items(items)
    assert text.count(";") == 2  # one separator plus one escaped in a name
    assert decode_order_items(text) == items
    assert decode_order_items("") == []


def test_decode_rejects_short_entries():
    with pytest.raises(ValueError):
        decode_order_items("1:Mug:20.0")


def test_promotion_table_round_trip(tmp_path, config):
    table = CsvPromotionTable(tmp_path / "promotions.csv", config)
    promotions = [
        Promotion.discount(promotion_id="PROMO001", name="Sale, everything", valid_from=START,
                           valid_until=END, target_item_id="-1", discount_rate=0.85),
        Promotion.full_reduction(promotion_id="PROMO002", name="Spend 300", valid_from=START,
                                 valid_until=END, threshold_amount=300.0, reduction_amount=50.0, active=False),
    ]
    table.save(promotions)
    assert table.load() == promotions

    df = pd.read_csv(tmp_path / "promotions.csv", dtype=str, keep_default_na=False)
    assert list(df.columns) == PROMOTION_COLUMNS
    # kind-specific fields of the other kind stay empty
    assert df.loc[0, "threshold_amount"] == ""
    assert df.loc[1, "target_item_id"] == ""


def test_order_table_round_trip(tmp_path, config):
    table = CsvOrderTable(tmp_path / "orders.csv", config)
    order = Order(
        order_id="ORD0000000000000001", user_id="alice",
        items=[OrderItem(item_id="1", item_name="Mug", unit_price=20.0, quantity=2)],
        created_at=START, total_amount=40.0, shipping_address="1 Main St, Springfield",
        status=OrderStatus.SHIPPED, status_changed_at=END,
    )
    table.save([order])
    assert table.load() == [order]
    df = pd.read_csv(tmp_path / "orders.csv", dtype=str)
    assert list(df.columns) == ORDER_COLUMNS


def test_malformed_rows_are_skipped(tmp_path, config):
    path = tmp_path / "orders.csv"
    good = "ORD1,alice,1:Mug:20.0:1,2024-05-01T09:30:00,20.0,Home,PENDING,2024-05-01T09:30:00"
    bad = "ORD2,bob,1:Mug:20.0:1,2024-05-01T09:30:00,20.0,Home,LOST,2024-05-01T09:30:00"
    path.write_text(",".join(ORDER_COLUMNS) + "\n" + good + "\n" + bad + "\n")
    orders = CsvOrderTable(path, config).load()
    assert [o.order_id for o in orders] == ["ORD1"]


def test_item_repository_stock_and_save(items, config, tmp_path):
    assert items.get_stock("1") == 10
    items.decrement_stock("1", 3)
    items.set_stock("2", 1)
    items.save()

    reloaded = CsvItemRepository(tmp_path / config.items_file, config)
    assert reloaded.get_stock("1") == 7
    assert reloaded.get_stock("2") == 1
    assert reloaded.find_item_by_id("3").name == "Mug"
    assert reloaded.find_item_by_id("99") is None
    with pytest.raises(NotFoundError):
        reloaded.get_stock("99")

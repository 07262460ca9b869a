from datetime import timedelta

from retailsim.display import (
    ORDER_TABLE_COLUMNS,
    format_order_detail,
    format_pricing_preview,
    orders_frame,
    promotions_frame,
)
from retailsim.data.models import BasketLine, Promotion
from retailsim.promotions.pricer import PromotionPricer


def test_orders_frame(book, items):
    book.create("alice", [BasketLine(item=items.find_item_by_id("1"), quantity=1)], "1 Main St")
    df = orders_frame(book.list_orders())
    assert list(df.columns) == ORDER_TABLE_COLUMNS
    assert df.loc[0, "status"] == "Pending"
    assert df.loc[0, "lines"] == 1
    assert orders_frame([]).empty


def test_promotions_frame(catalog, now):
    catalog.add(Promotion.discount(
        promotion_id="PROMO001", name="Sale", valid_from=now, valid_until=now + timedelta(days=1),
        target_item_id="-1", discount_rate=0.8,
    ))
    df = promotions_frame(catalog.list_promotions())
    assert df.loc[0, "tag"] == "8-tenths"
    assert df.loc[0, "type"] == "Discount"
    assert df.loc[0, "state"] == "active"


def test_pricing_preview_rounds_for_display(catalog, items, now):
    catalog.add(Promotion.discount(
        promotion_id="PROMO001", name="Sale", valid_from=now, valid_until=now + timedelta(days=1),
        target_item_id="1", discount_rate=0.8,
    ))
    catalog.add(Promotion.full_reduction(
        promotion_id="PROMO002", name="Deal", valid_from=now, valid_until=now + timedelta(days=1),
        threshold_amount=100.0, reduction_amount=10.0,
    ))
    basket = [BasketLine(item=items.find_item_by_id("1"), quantity=2)]
    text = format_pricing_preview(basket, PromotionPricer().calculate(basket, catalog, now))
    assert "Original total: 200.00" in text
    assert "Discounts: -40.00 (Headphones 8-tenths)" in text
    assert "Subtotal: 160.00" in text
    assert "Reductions: -10.00 (reduction: spend >= 100, save 10)" in text
    assert text.splitlines()[-1] == "Payable: 150.00 [saved 50.00]"


def test_order_detail_lists_lines(book, items):
    order = book.create("alice", [BasketLine(item=items.find_item_by_id("2"), quantity=2)], "1 Main St")
    text = format_order_detail(order)
    assert f"Order: {order.order_id}" in text
    assert "Status: Pending" in text
    assert "Novel" in text
    assert text.endswith("Total: 100.00")

from datetime import datetime, timedelta

import pytest

from retailsim.data.models import Order, OrderItem, OrderStatus, generate_order_id

CREATED = datetime(2024, 5, 1, 12, 0, 0)


def test_order_id_format_and_determinism():
    order_id = generate_order_id("alice", CREATED)
    assert order_id.startswith("ORD")
    assert len(order_id) == 19
    assert order_id[3:].isdigit()
    assert generate_order_id("alice", CREATED) == order_id


def test_order_id_depends_on_user_second_and_salt():
    base = generate_order_id("alice", CREATED)
    assert generate_order_id("bob", CREATED) != base
    assert generate_order_id("alice", CREATED + timedelta(seconds=1)) != base
    assert generate_order_id("alice", CREATED, salt=1) != base
    # sub-second differences collapse onto the same id
    assert generate_order_id("alice", CREATED + timedelta(milliseconds=300)) == base


def test_status_lifecycle():
    assert OrderStatus.PENDING.next() == OrderStatus.SHIPPED
    assert OrderStatus.SHIPPED.next() == OrderStatus.DELIVERED
    assert OrderStatus.DELIVERED.next() is None
    assert OrderStatus.SHIPPED.label == "Shipped"


def test_status_parse_accepts_labels_and_values():
    assert OrderStatus.parse("Shipped") == OrderStatus.SHIPPED
    assert OrderStatus.parse(" delivered ") == OrderStatus.DELIVERED
    with pytest.raises(ValueError):
        OrderStatus.parse("LOST")


def test_set_status_and_elapsed_time():
    order = Order(
        order_id="ORD1", user_id="alice",
        items=[OrderItem(item_id="1", item_name="Mug", unit_price=20.0, quantity=2)],
        created_at=CREATED, total_amount=40.0, shipping_address="1 Main St",
        status_changed_at=CREATED,
    )
    assert order.status == OrderStatus.PENDING
    assert order.items[0].subtotal == 40.0
    later = CREATED + timedelta(seconds=15)
    assert order.seconds_in_status(later) == 15.0
    order.set_status(OrderStatus.SHIPPED, later)
    assert order.status_changed_at == later
    assert order.seconds_in_status(later) == 0.0

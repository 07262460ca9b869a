from retailsim.data.models import BasketLine
from retailsim.runtime import bootstrap
from retailsim.seed_data import main as seed


def test_bootstrap_wires_a_working_store(config, clock, tmp_path):
    seed(["--output-dir", str(tmp_path), "--items", "5", "--seed", "1"])

    with bootstrap(config, clock=clock) as front:
        assert len(front.stores.items.list_items()) == 5
        assert len(front.catalog.list_promotions()) == 5
        assert not front.book.scheduler.running

        item = front.stores.items.find_item_by_id("1")
        result = front.desk.place_order("alice", [BasketLine(item=item, quantity=1)], "1 Main St")
        assert result.ok

    with bootstrap(config, clock=clock) as again:
        assert [o.order_id for o in again.book.list_orders()] == [result.payload.order_id]


def test_bootstrap_starts_scheduler_when_enabled(config, clock):
    config.auto_update_enabled = True
    front = bootstrap(config, clock=clock)
    try:
        assert front.book.scheduler.running
    finally:
        front.close()
    assert not front.book.scheduler.running

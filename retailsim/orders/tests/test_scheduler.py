import time

from retailsim.data.models import BasketLine, OrderStatus


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_scheduler_advances_orders_in_background(book, items, clock):
    order = book.create("alice", [BasketLine(item=items.find_item_by_id("1"), quantity=1)], "1 Main St")
    book.start_scheduler()
    assert book.scheduler.running

    clock.advance(seconds=10)
    assert wait_for(lambda: book.find_by_id(order.order_id).status == OrderStatus.SHIPPED)
    clock.advance(seconds=20)
    assert wait_for(lambda: book.find_by_id(order.order_id).status == OrderStatus.DELIVERED)

    assert book.stop_scheduler() is True
    assert not book.scheduler.running


def test_start_twice_keeps_one_thread(book):
    book.start_scheduler()
    thread = book.scheduler._thread
    book.start_scheduler()
    assert book.scheduler._thread is thread
    assert book.stop_scheduler() is True


def test_stop_without_start_is_a_no_op(book):
    assert book.stop_scheduler() is True


def test_scan_failures_do_not_kill_the_loop(book, monkeypatch):
    calls = []

    def flaky(now=None):
        calls.append(now)
        if len(calls) == 1:
            raise OSError("disk full")
        return []

    monkeypatch.setattr(book, "advance_statuses", flaky)
    book.start_scheduler()
    assert wait_for(lambda: len(calls) >= 3)
    assert book.scheduler.running
    assert book.stop_scheduler() is True


def test_book_context_manager_stops_scheduler(book):
    with book:
        book.start_scheduler()
        assert book.scheduler.running
    assert not book.scheduler.running


def test_close_reports_a_scheduler_that_did_not_stop(book, monkeypatch, capsys):
    monkeypatch.setattr(book.scheduler, "stop", lambda: False)
    assert book.close() is False
    assert "still running" in capsys.readouterr().out

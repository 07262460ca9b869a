from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

from ..config import AppConfig
from ..logging import get_logger

if TYPE_CHECKING:
    from .book import OrderBook


class OrderStatusScheduler:
    """
    Background loop that moves orders forward on elapsed time.

    It owns no data: each poll is a call to ``OrderBook.advance_statuses``,
    which runs under the book's lock. The stop event is checked once per
    poll interval, so ``stop`` returns within one interval plus one scan.
    """

    def __init__(self, book: "OrderBook", config: AppConfig) -> None:
        self.book = book
        self.poll_interval = config.scheduler_poll_interval_seconds
        self.join_timeout = config.scheduler_join_timeout_seconds
        self.logger = get_logger(__name__, config)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="order-status-scheduler", daemon=True)
        self._thread.start()
        self.logger.info(f"Order status scheduler started (poll every {self.poll_interval}s)")

    def stop(self) -> bool:
        """Signal the loop and wait for it; False if it outlived the join timeout."""
        thread = self._thread
        if thread is None:
            return True
        self._stop.set()
        thread.join(self.join_timeout)
        if thread.is_alive():
            self.logger.error(f"Order status scheduler did not stop within {self.join_timeout}s")
            return False
        self._thread = None
        self.logger.info("Order status scheduler stopped")
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            try:
                moved = self.book.advance_statuses()
            except Exception:
                self.logger.exception("Order status scan failed")
                continue
            if moved:
                self.logger.info(f"Advanced {len(moved)} orders: {', '.join(moved)}")

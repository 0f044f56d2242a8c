"""Status polling with process-wide deduplication.

Several views of the same data (a dashboard, a history list, a detail pane)
may each want to poll for analysis progress. Every poll goes through one
``GlobalPollingManager`` so that only one request is in flight at a time and
polls closer together than the cooldown are dropped.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from sales_analyzer.constants.polling_constants import (
    MAX_POLL_DURATION_SECONDS,
    POLL_COOLDOWN_SECONDS,
    POLL_INTERVAL_SECONDS,
)

logger = logging.getLogger(__name__)


class GlobalPollingManager:
    """Admission control for polls: one at a time, at most one per cooldown."""

    def __init__(
        self,
        cooldown: float = POLL_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown = cooldown
        self._clock = clock
        self._lock = threading.Lock()
        self._is_polling = False
        self._last_poll_started: float | None = None

    @property
    def is_polling(self) -> bool:
        with self._lock:
            return self._is_polling

    def try_acquire(self) -> bool:
        """Claim the right to poll now.

        Returns:
            False if a poll is already in flight or the previous poll started
            less than ``cooldown`` seconds ago.
        """
        with self._lock:
            now = self._clock()
            if self._is_polling:
                return False
            if self._last_poll_started is not None and now - self._last_poll_started < self.cooldown:
                return False
            self._is_polling = True
            self._last_poll_started = now
            return True

    def release(self) -> None:
        with self._lock:
            self._is_polling = False

    def reset(self) -> None:
        """Forget all state (used between independent polling sessions and in tests)."""
        with self._lock:
            self._is_polling = False
            self._last_poll_started = None


_manager = GlobalPollingManager()


def get_polling_manager() -> GlobalPollingManager:
    return _manager


class Poller:
    """Call ``on_poll`` every ``interval`` seconds until told to stop.

    Polling ends when ``stop()`` is called, ``should_stop()`` returns True, or
    ``max_duration`` seconds have elapsed. Exceptions raised by ``on_poll``
    are logged and polling continues. The first poll runs immediately.
    """

    def __init__(
        self,
        on_poll: Callable[[], object],
        interval: float = POLL_INTERVAL_SECONDS,
        max_duration: float = MAX_POLL_DURATION_SECONDS,
        should_stop: Callable[[], bool] | None = None,
        manager: GlobalPollingManager | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.on_poll = on_poll
        self.interval = interval
        self.max_duration = max_duration
        self.should_stop = should_stop
        self.manager = manager or get_polling_manager()
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.poll_count = 0

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        self._stop_event.set()

    def _poll_once(self) -> None:
        if not self.manager.try_acquire():
            logger.debug("Skipping poll: another poll is in flight or within cooldown")
            return
        try:
            self.on_poll()
            self.poll_count += 1
        except Exception:
            logger.exception("Error during poll")
        finally:
            self.manager.release()

    def run(self) -> int:
        """Poll on the calling thread until a stop condition is met.

        Returns:
            Number of polls that completed without raising.
        """
        started = self._clock()
        while not self._stop_event.is_set():
            if self._clock() - started > self.max_duration:
                logger.info("Max polling duration reached, stopping polling")
                break
            if self.should_stop is not None and self.should_stop():
                break
            self._poll_once()
            if self._stop_event.wait(self.interval):
                break
        self._stop_event.set()
        return self.poll_count

    def start(self) -> threading.Thread:
        """Run the polling loop on a daemon thread."""
        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

import logging
import threading
from collections.abc import Callable
from typing import Optional


class ThreadTimer:
    """Handle over a `threading.Timer` owned by a `ThreadScheduler`."""

    def __init__(
        self,
        scheduler: "ThreadScheduler",
        timer: threading.Timer,
        on_cancel: Optional[Callable[[], None]],
    ) -> None:
        self._scheduler = scheduler
        self._timer = timer
        self._on_cancel = on_cancel

    def cancel(self) -> None:
        self._timer.cancel()
        self._scheduler.on_done(self)
        if self._on_cancel is not None:
            self._on_cancel()


class ThreadScheduler:
    """
    Scheduler backed by `threading.Timer`, for hosts without an event loop.

    Each scheduled action runs on its own daemon timer thread. Live timers are
    tracked until they complete so that `shutdown()` can cancel whatever is
    still pending; every cancelled action gets its `on_cancel` hook called, so
    owners are released and the scheduler stays usable afterwards. Exceptions
    raised by an action propagate to `threading.excepthook`.
    """

    def __init__(self) -> None:
        self._timers: set[ThreadTimer] = set()
        self._lock = threading.Lock()
        self._logger = logging.getLogger("infra.thread_scheduler")

    @property
    def remaining_timers(self) -> int:
        """Number of timers that have been started and have not finished yet."""
        with self._lock:
            return len(self._timers)

    def call_later(
        self,
        delay: float,
        action: Callable[[], None],
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> ThreadTimer:
        handle: ThreadTimer

        def run() -> None:
            try:
                action()
            finally:
                self.on_done(handle)

        timer = threading.Timer(delay, run)
        timer.daemon = True
        handle = ThreadTimer(self, timer, on_cancel)
        with self._lock:
            self._timers.add(handle)
        timer.start()
        return handle

    def on_done(self, handle: ThreadTimer) -> None:
        with self._lock:
            self._timers.discard(handle)

    def shutdown(self) -> None:
        """Cancel every timer that has not fired yet."""
        with self._lock:
            handles = list(self._timers)
            self._timers.clear()

        for handle in handles:
            handle.cancel()

        if handles:
            self._logger.info(f"Cancelled {len(handles)} pending timer(s)")

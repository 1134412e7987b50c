import asyncio
import logging
from collections.abc import Callable
from typing import Optional


class LoopTimer:
    """
    Handle over an action scheduled on an event loop.

    When scheduling happens from another thread the underlying
    `asyncio.TimerHandle` only exists once the loop has processed the request,
    so the handle is attached later. A cancel that arrives before that
    cancels the timer as soon as it is attached.
    """

    def __init__(self, on_cancel: Optional[Callable[[], None]]) -> None:
        self._on_cancel = on_cancel
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False

    @property
    def handle(self) -> Optional[asyncio.TimerHandle]:
        return self._handle

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def attach(self, handle: asyncio.TimerHandle) -> None:
        if self._cancelled:
            handle.cancel()
        self._handle = handle

    def cancel(self) -> None:
        if self._cancelled:
            return

        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
        if self._on_cancel is not None:
            self._on_cancel()


class LoopScheduler:
    """
    Scheduler backed by an asyncio event loop's timer queue.

    Actions are registered with `loop.call_later`, so they always run on a
    later iteration of the loop, even with a zero delay. Exceptions raised by
    an action are reported by the loop's exception handler.

    When no loop is given, the running loop is looked up each time an action
    is scheduled, which lets one scheduler serve successive loops (e.g. one per
    test). Scheduling from a thread without a running loop raises RuntimeError.
    With an explicit loop, calls made from other threads are handed over with
    `call_soon_threadsafe`, which also wakes the loop up.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._logger = logging.getLogger("infra.loop_scheduler")

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(
        self,
        delay: float,
        action: Callable[[], None],
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> LoopTimer:
        loop = self.loop
        timer = LoopTimer(on_cancel)

        def schedule() -> None:
            timer.attach(loop.call_later(delay, action))

        if self._in_loop_thread(loop):
            schedule()
        else:
            loop.call_soon_threadsafe(schedule)
            self._logger.debug(f"Handed {action!r} over to loop thread")

        self._logger.debug(f"Scheduled {action!r} in {delay}s")
        return timer

    @staticmethod
    def _in_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            return False

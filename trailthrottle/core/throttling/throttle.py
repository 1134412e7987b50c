import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import timedelta
from types import MethodType
from typing import Any, Callable, Optional

from trailthrottle.bootstrap.deps import get_config, get_scheduler
from trailthrottle.core.ports.scheduler import Scheduler
from trailthrottle.core.throttling.delay import Duration, NegativeDelayPolicy, normalize_delay


@dataclass
class ThrottleState:
    """
    Mutable state owned by a single `Throttled` wrapper.

    While `is_throttled` is true a deferred firing is pending and the saved
    arguments are the ones it will deliver. When the wrapper is used as a
    method, the receiver is the first saved positional argument.
    """

    is_throttled: bool = False
    """Whether a window is open (a firing is pending)."""

    saved_args: tuple = ()
    """Positional arguments of the latest call in the current window."""

    saved_kwargs: dict[str, Any] = field(default_factory=dict)
    """Keyword arguments of the latest call in the current window."""

    def save(self, args: tuple, kwargs: dict[str, Any]) -> None:
        self.saved_args = args
        self.saved_kwargs = kwargs

    def close(self) -> None:
        """Return to idle and drop the saved arguments."""
        self.is_throttled = False
        self.saved_args = ()
        self.saved_kwargs = {}


class Throttled:
    """
    Trailing-edge throttle around a callable.

    The first call received while idle opens a window of `delay` seconds on the
    scheduler. Every call made during the window replaces the saved arguments,
    and when the window closes the callback runs once with the arguments of the
    last call. The wrapper itself never invokes the callback synchronously and
    always returns None.

    Used as a class attribute, the wrapper binds like a function: the instance
    is passed as the first argument, so the receiver delivered on firing is the
    one of the last call. The window is shared by all instances.
    """

    def __init__(self, callback: Callable[..., Any], delay: float, scheduler: Scheduler) -> None:
        functools.update_wrapper(self, callback)
        self._callback = callback
        self._name = getattr(callback, "__qualname__", repr(callback))
        self._delay = delay
        self._scheduler = scheduler
        self._state = ThrottleState()
        self._window = 0
        self._lock = threading.Lock()
        self._logger = logging.getLogger("core.throttling.throttle")

    @property
    def delay(self) -> float:
        """Window length in seconds."""
        return self._delay

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def state(self) -> ThrottleState:
        return self._state

    @property
    def pending(self) -> bool:
        """True while a firing is scheduled and has not completed."""
        return self._state.is_throttled

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._state.save(args, kwargs)
            if self._state.is_throttled:
                return

            self._state.is_throttled = True
            self._window += 1
            window = self._window
            try:
                self._scheduler.call_later(
                    self._delay,
                    functools.partial(self._fire, window),
                    on_cancel=functools.partial(self._release, window)
                )
            except BaseException:
                # nothing was scheduled, stay idle
                self._state.close()
                raise

        self._logger.debug(f"Window opened for {self._name} ({self._delay}s)")

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return MethodType(self, instance)

    def __repr__(self) -> str:
        return f"<Throttled {self._name} delay={self._delay} pending={self.pending}>"

    def _is_current(self, window: int) -> bool:
        return self._state.is_throttled and self._window == window

    def _release(self, window: int) -> None:
        """Close `window` without firing, after its timer was cancelled."""
        with self._lock:
            if not self._is_current(window):
                return
            self._state.close()

        self._logger.debug(f"Window for {self._name} cancelled")

    def _fire(self, window: int) -> None:
        """
        Deferred action: deliver the latest saved arguments, then close the window.

        The window is closed even if the callback raises. The exception is
        logged and re-raised so the scheduler reports it the host's way.
        A window that was already released is left alone.
        """
        with self._lock:
            if not self._is_current(window):
                return
            args = self._state.saved_args
            kwargs = self._state.saved_kwargs

        try:
            self._logger.debug(f"Firing {self._name}")
            self._callback(*args, **kwargs)
        except Exception as ex:
            self._logger.error(
                f"Throttled callback {self._name} failed: {str(ex)}",
                exc_info=ex
            )
            raise
        finally:
            with self._lock:
                if self._window == window:
                    self._state.close()


def make_throttled(
    callback: Callable[..., Any],
    delay: Optional[Duration] = None,
    *,
    scheduler: Optional[Scheduler] = None,
    negative_delay: Optional[NegativeDelayPolicy] = None,
) -> Throttled:
    """
    Wrap `callback` so it runs at most once per `delay` seconds, trailing edge.

    `delay` defaults to the configured `default_delay` (0 unless overridden),
    `scheduler` to the configured scheduler and `negative_delay` to the
    configured policy. See `Throttled` for the call semantics.
    """
    config = get_config()

    if delay is None:
        delay = config.default_delay
    if negative_delay is None:
        negative_delay = config.negative_delay
    if scheduler is None:
        scheduler = get_scheduler()

    return Throttled(callback, normalize_delay(delay, negative_delay), scheduler)


def throttle(
    delay: Optional[Duration] = None,
    *,
    scheduler: Optional[Scheduler] = None,
    negative_delay: Optional[NegativeDelayPolicy] = None,
):
    """
    Decorator form of `make_throttled`.

    Usable as `@throttle(0.1)`, `@throttle(timedelta(milliseconds=100))`
    or bare `@throttle` for the configured default delay.
    """
    if callable(delay) and not isinstance(delay, timedelta):
        return make_throttled(delay, scheduler=scheduler, negative_delay=negative_delay)

    def decorator(func: Callable[..., Any]) -> Throttled:
        return make_throttled(func, delay, scheduler=scheduler, negative_delay=negative_delay)

    return decorator

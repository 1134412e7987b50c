from collections.abc import Callable
from typing import Optional, Protocol


class TimerHandle(Protocol):
    """A pending deferred action returned by a scheduler."""

    def cancel(self) -> None:
        """
        Prevent the action from running if it has not started yet.

        The `on_cancel` hook given at scheduling time is invoked, so the owner
        of the action can release whatever it reserved for it.
        """


class Scheduler(Protocol):
    """
    Interface for the deferred-execution primitive a throttle depends on.

    A scheduler exposes a single capability: run a nullary action no earlier
    than `delay` seconds from now, outside the caller's stack. Implementations
    must never run the action synchronously, even when `delay` is zero, and
    must call `on_cancel` whenever they cancel an action that was accepted
    (through the returned handle or a scheduler-wide teardown).
    """

    def call_later(
        self,
        delay: float,
        action: Callable[[], None],
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> TimerHandle:
        """Schedule `action` to run after `delay` seconds."""

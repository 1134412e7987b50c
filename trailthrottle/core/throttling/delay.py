import logging
import math
from datetime import timedelta
from typing import Literal, Union

Duration = Union[int, float, timedelta]
NegativeDelayPolicy = Literal["clamp", "reject"]

_logger = logging.getLogger("core.throttling.delay")


def normalize_delay(delay: Duration, policy: NegativeDelayPolicy = "clamp") -> float:
    """
    Convert a delay into a non-negative number of seconds.

    Accepts seconds as int/float or a `timedelta`. Negative values are either
    clamped to zero (with a warning) or rejected, depending on `policy`.
    """
    if isinstance(delay, timedelta):
        seconds = delay.total_seconds()
    elif isinstance(delay, (int, float)) and not isinstance(delay, bool):
        seconds = float(delay)
    else:
        raise TypeError(
            f"delay must be a number of seconds or a timedelta, got {type(delay).__name__}"
        )

    if not math.isfinite(seconds):
        raise ValueError(f"delay must be finite, got {seconds}")

    if seconds < 0:
        if policy == "reject":
            raise ValueError(f"delay must be non-negative, got {seconds}")
        if policy != "clamp":
            raise ValueError(f"Unknown negative delay policy: {policy!r}")
        _logger.warning(f"Negative delay {seconds} clamped to 0")
        return 0.0

    return seconds

import logging
from typing import Optional

from trailthrottle.bootstrap.deps import get_config


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging; without a level, the configured `log_level` is used."""
    logging.basicConfig(
        level=level or get_config().log_level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional


@lru_cache
def get_configfile() -> Optional[Path]:
    """
    Locate the optional YAML configuration file.

    Priority: TRAILTHROTTLECONFIG env var > 'trailthrottle.yaml' in the current
    working directory. Returns None when neither is set, in which case only
    environment variables and defaults apply.
    """
    raw = os.getenv("TRAILTHROTTLECONFIG")

    if raw is None:
        file = Path.cwd() / "trailthrottle.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Fix or unset the TRAILTHROTTLECONFIG environment variable\n"
            "  - Or place a 'trailthrottle.yaml' file in the current working directory."
        )

    return file

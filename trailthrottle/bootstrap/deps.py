import json
from functools import lru_cache

from pydantic import ValidationError

from trailthrottle.bootstrap.config.settings import ThrottleConfig
from trailthrottle.core.ports.scheduler import Scheduler
from trailthrottle.infra.loop_scheduler import LoopScheduler
from trailthrottle.infra.thread_scheduler import ThreadScheduler


@lru_cache
def get_scheduler() -> Scheduler:
    config = get_config()

    if config.scheduler == "thread":
        return ThreadScheduler()

    return LoopScheduler()


@lru_cache
def get_config() -> ThrottleConfig:
    try:
        return ThrottleConfig()
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(part) for part in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))

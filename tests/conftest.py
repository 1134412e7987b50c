import pytest

from tests.fake.fake_scheduler import FakeScheduler

from trailthrottle.bootstrap.config.loader import get_configfile
from trailthrottle.bootstrap.deps import get_config, get_scheduler


def clear_caches() -> None:
    get_configfile.cache_clear()
    get_config.cache_clear()
    get_scheduler.cache_clear()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRAILTHROTTLECONFIG", raising=False)
    for name in ("DEFAULT_DELAY", "NEGATIVE_DELAY", "SCHEDULER", "LOG_LEVEL"):
        monkeypatch.delenv(f"TRAILTHROTTLE_{name}", raising=False)

    clear_caches()
    try:
        yield
    finally:
        clear_caches()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def recorder():
    calls = []

    def callback(*args, **kwargs):
        calls.append((args, kwargs))

    callback.calls = calls
    return callback

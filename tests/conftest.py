"""Pytest configuration and shared fixtures.

Usage Guide:
- For schema tests: build JSON:API resources with tests.factories
- For poll/refresh tests: use the ``clock`` fixture, which also provides
  an async ``sleep`` that advances time instead of waiting
- For HTTP tests: use httpx.MockTransport (see tests/api)
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from cl_exports.config import get_settings

# -----------------------------------------------------------------------------
# Test Timeline Constants
# -----------------------------------------------------------------------------
NOW_EPOCH = 1_718_000_000  # 2024-06-10T06:13:20Z
NOW = datetime.fromtimestamp(NOW_EPOCH, tz=UTC)
STARTED_AT_ISO = "2024-06-10T06:00:00Z"
EARLIER_STARTED_AT_ISO = "2024-06-09T18:30:00Z"


class FakeClock:
    """Deterministic epoch clock with an async sleep that advances it."""

    def __init__(self, now: float = NOW_EPOCH) -> None:
        self.now = float(now)
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at NOW_EPOCH."""
    return FakeClock()


@pytest.fixture(autouse=True)
def _clear_settings_cache(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from the developer's environment and .env file."""
    for name in (
        "CL_ORGANIZATION",
        "CL_DOMAIN",
        "CL_CLIENT_ID",
        "CL_CLIENT_SECRET",
        "CL_ACCESS_TOKEN",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir("/")  # no stray .env
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

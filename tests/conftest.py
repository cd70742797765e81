"""Root test configuration."""

import logging
from typing import Any

import pytest
import structlog

from cloudwright.errors import CloudwrightError
from cloudwright.lifecycle.models import ResourceKind


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


API_URL = "https://api.example.test/v0"


class RecordingSleep:
    """Stands in for asyncio.sleep and records every requested delay."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FakeChecker:
    """Status checker that replays scripted fetch results.

    Each script entry is either a status string, ``None`` (empty body), a
    dict (returned as-is) or an exception instance (raised).
    """

    def __init__(self, script: list[Any], kind: ResourceKind = ResourceKind.AGENT) -> None:
        self.kind = kind
        self._script = list(script)
        self.fetches = 0

    async def fetch(self, name: str) -> dict[str, Any] | None:
        self.fetches += 1
        item = self._script[min(self.fetches, len(self._script)) - 1]
        if isinstance(item, CloudwrightError):
            raise item
        if item is None or isinstance(item, dict):
            return item
        return {"metadata": {"name": name}, "status": item}

    def extract_status(self, resource: dict[str, Any]) -> str:
        return resource.get("status") or "DEPLOYING"


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def platform_env(monkeypatch):
    """Isolate settings from the developer's environment."""
    for var in (
        "CLOUDWRIGHT_API_URL",
        "CLOUDWRIGHT_ENV",
        "CLOUDWRIGHT_WORKSPACE",
        "CLOUDWRIGHT_API_KEY",
        "CLOUDWRIGHT_READ_ONLY",
        "CLOUDWRIGHT_TOOLSETS",
        "CLOUDWRIGHT_POLL_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def make_checker():
    return FakeChecker

"""Shared pytest fixtures."""

from datetime import datetime, timedelta

import pytest
import respx
from loguru import logger

from api_resources.services import (
    ApiService,
    CacheManager,
    MemorySession,
    NotificationBag,
)
from api_resources.settings import Settings

BASE_URL = "https://api.test.dev"


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record retry sleeps instead of sleeping."""
    calls: list[float] = []
    monkeypatch.setattr(
        "api_resources.services.transport.time.sleep", lambda s: calls.append(s)
    )
    return calls


@pytest.fixture
def api_mock() -> respx.MockRouter:
    """HTTP mock scoped to one test; paths are relative to BASE_URL."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
def settings() -> Settings:
    return Settings(
        base_url=BASE_URL,
        api_token="secret-token",
        cache_prefix="test_",
        retry_attempts=3,
        retry_delay=100,
        timeout=5,
        logging_include_response_data=True,
    )


@pytest.fixture
def cache(clock: FakeClock) -> CacheManager:
    return CacheManager(prefix="test_", clock=clock)


@pytest.fixture
def session() -> MemorySession:
    return MemorySession()


@pytest.fixture
def notifier() -> NotificationBag:
    return NotificationBag()


@pytest.fixture
def service(
    settings: Settings,
    cache: CacheManager,
    session: MemorySession,
    notifier: NotificationBag,
    sleeps: list[float],
) -> ApiService:
    """An ApiService wired to in-memory collaborators."""
    api = ApiService(settings, cache=cache, session=session, notifier=notifier)
    yield api
    api.close()


@pytest.fixture
def log_records() -> list[dict]:
    """Capture loguru records emitted during the test."""
    records: list[dict] = []
    handler_id = logger.add(
        lambda message: records.append(message.record), level="DEBUG"
    )
    yield records
    logger.remove(handler_id)

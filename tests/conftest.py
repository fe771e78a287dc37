"""
Test configuration and fixtures.
Uses an in-memory RecordStore double and a mocked Redis client. No real Redis.
"""
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

from catchhook.main import create_app
from catchhook.schemas.webhook import WebhookRecord
from catchhook.store import INDEX_KEY, StoreUnavailableError, get_store


class FakeStore:
    """
    In-memory stand-in for RecordStore with the same async interface.
    Add operation names to `fail_on` to make them raise StoreUnavailableError.
    """

    def __init__(self):
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.index: list[str] = []
        self.fail_on: set[str] = set()
        self.calls: list[tuple] = []

    def _check(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        if op in self.fail_on:
            raise StoreUnavailableError(f"{op} failed")

    async def ping(self) -> None:
        self._check("ping")

    async def get(self, key):
        self._check("get", key)
        return self.data.get(key)

    async def set(self, key, value, ttl=None):
        self._check("set", key)
        self.data[key] = value
        self.ttls[key] = ttl

    async def push_index(self, key, max_entries):
        self._check("push_index", key)
        self.index.insert(0, key)
        del self.index[max_entries:]

    async def index_range(self, start=0, stop=-1):
        self._check("index_range", start, stop)
        if stop == -1:
            return list(self.index[start:])
        return list(self.index[start:stop + 1])

    async def delete(self, *keys):
        self._check("delete", *keys)
        removed = 0
        for key in keys:
            if key == INDEX_KEY:
                if self.index:
                    removed += 1
                self.index = []
            elif self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def close(self) -> None:
        pass

    def expire(self, key: str) -> None:
        """Simulate the record TTL elapsing while the key stays indexed."""
        self.data.pop(key, None)
        self.ttls.pop(key, None)

    def add_record(self, record: WebhookRecord) -> None:
        """Store a record and append it to the index (oldest last)."""
        self.data[record.id] = record.to_json()
        self.ttls[record.id] = 86400
        self.index.append(record.id)


def make_record(
    key: str = "webhook:1",
    *,
    body: str = '{"event": "ping"}',
    method: str = "POST",
    url: str = "/webhook",
    headers: dict | None = None,
    timestamp: datetime | None = None,
) -> WebhookRecord:
    return WebhookRecord(
        id=key,
        timestamp=timestamp or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
        headers=headers if headers is not None else {"Content-Type": ["application/json"]},
        body=body,
        method=method,
        url=url,
    )


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def mock_redis():
    """Mock for the async Redis client wrapped by RecordStore."""
    redis_mock = AsyncMock()
    redis_mock.set = AsyncMock(return_value=True)
    redis_mock.ping = AsyncMock(return_value=True)
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    redis_mock.pipeline = MagicMock(return_value=pipe)
    return redis_mock


@pytest.fixture
def app(fake_store):
    application = create_app()
    application.dependency_overrides[get_store] = lambda: fake_store
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """TestClient without lifespan, so no Redis connection is attempted."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def record_factory():
    return make_record

from datetime import datetime, timedelta, timezone

import pytest

from inboxthread.infrastructure.sqlite.client import SQLiteThreadStore
from inboxthread.infrastructure.stores.memory_thread_store import InMemoryThreadStore


class StepClock:
    """Deterministic clock: each call is one minute after the previous."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture(name="clock")
def clock_fixture():
    return StepClock()


@pytest.fixture(name="memory_store")
def memory_store_fixture():
    return InMemoryThreadStore()


@pytest.fixture(name="sqlite_store")
def sqlite_store_fixture(tmp_path):
    return SQLiteThreadStore(db_path=tmp_path / "threads.db")


@pytest.fixture(name="store", params=["memory", "sqlite"])
def store_fixture(request, tmp_path):
    if request.param == "memory":
        return InMemoryThreadStore()
    return SQLiteThreadStore(db_path=tmp_path / "threads.db")


@pytest.fixture(name="make_payload")
def make_payload_fixture():
    def _make(**overrides):
        payload = {
            "from": "Alice Example <alice@example.com>",
            "to": "bob@example.org",
            "subject": "Need help",
            "text": "Hello Bob",
            "message_id": "<o@x>",
            "date": "2024-03-01T10:00:00Z",
        }
        payload.update(overrides)
        return {k: v for k, v in payload.items() if v is not None}

    return _make

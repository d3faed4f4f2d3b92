"""Shared pytest fixtures and configuration."""

import os
import time
import pytest
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("LOG_FORMAT", "text")

from tests.utils.fakes import FakeSupabase  # noqa: E402


@pytest.fixture
def application():
    """Parent application row."""
    return {"id": "A1", "tenant_id": "T1"}


@pytest.fixture
def fake_supabase(monkeypatch, application):
    """In-memory Supabase wired in place of both service-role and anon clients."""
    db = FakeSupabase({"applications": [application], "tasks": []})
    monkeypatch.setattr("src.services.supabase_client.get_supabase_client", lambda: db)
    monkeypatch.setattr("src.services.supabase_client.get_anon_supabase_client", lambda: db)
    return db


@pytest.fixture
def mock_broadcast(monkeypatch):
    """Capture realtime broadcasts instead of calling Supabase Realtime."""
    sent = []

    async def fake_broadcast(topic, event, payload):
        sent.append({"topic": topic, "event": event, "payload": payload})

    monkeypatch.setattr("src.services.realtime.broadcast", fake_broadcast)
    return sent


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time


@pytest.fixture
def reset_supabase_clients(monkeypatch):
    """Start with no cached Supabase clients."""
    monkeypatch.setattr("src.services.supabase_client._client", None)
    monkeypatch.setattr("src.services.supabase_client._anon_client", None)


@pytest.fixture
def local_timezone():
    """Switch the process-local timezone (TZ + tzset) for the duration of a test."""
    original = os.environ.get("TZ")

    def use(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    yield use

    if original is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = original
    time.tzset()

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import revalpro` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from revalpro.main import create_app  # noqa: E402
from revalpro.repos.record_repo import RecordRepo  # noqa: E402
from revalpro.services import token_service  # noqa: E402
from revalpro.services.kv_store import InMemoryKeyValueStore  # noqa: E402
from revalpro.services.reminders import ReminderService  # noqa: E402


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repo(store: InMemoryKeyValueStore) -> RecordRepo:
    return RecordRepo(store)


@pytest.fixture
def reminder_service(store: InMemoryKeyValueStore) -> ReminderService:
    return ReminderService(store)


@pytest.fixture
def client(store: InMemoryKeyValueStore) -> TestClient:
    """A fresh app per test, backed by its own in-memory store."""
    return TestClient(create_app(store))


def mint_token(username: str = "nurse-1", roles: list[str] | None = None) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth_headers(username: str = "nurse-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(username)}"}


@pytest.fixture
def headers() -> dict[str, str]:
    return auth_headers()

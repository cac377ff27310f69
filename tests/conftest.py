"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models import Preset, Session
from storage import MemoryStorage, StorageUnavailableError


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def client(storage: MemoryStorage) -> TestClient:
    return TestClient(create_app(storage=storage))


@pytest.fixture()
def preset() -> Preset:
    return Preset(id="box-breathing", name="Box Breathing", type="breathing", duration=10, technique="box")


@pytest.fixture()
def broken_storage() -> MagicMock:
    """A storage whose every call fails as if the backend were unreachable."""
    mock = MagicMock()
    for name in (
        "create_session",
        "get_session",
        "list_sessions",
        "update_session",
        "delete_session",
        "get_settings",
        "upsert_settings",
    ):
        getattr(mock, name).side_effect = StorageUnavailableError("connection refused")
    return mock


def make_session(
    started_at: datetime,
    *,
    technique: str | None = "box",
    preset_name: str = "Box Breathing",
    preset_type: str = "breathing",
    duration: int = 600,
    completed_duration: int = 600,
    completed: bool = True,
    user_id: str | None = None,
    session_id: str | None = None,
) -> Session:
    """Build a finalized session record directly."""
    percentage = round(completed_duration / duration * 100)
    return Session(
        id=session_id or f"s-{started_at.timestamp()}-{technique}",
        user_id=user_id,
        preset_name=preset_name,
        preset_type=preset_type,
        technique=technique,
        duration=duration,
        completed_duration=completed_duration,
        completion_percentage=percentage,
        is_completed=completed,
        started_at=started_at,
        completed_at=started_at + timedelta(seconds=completed_duration),
    )


@pytest.fixture()
def now() -> datetime:
    """A fixed local 'now' in the middle of a Wednesday afternoon."""
    return datetime(2024, 5, 15, 15, 0).astimezone()

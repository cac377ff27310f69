"""Tests for SettingsManager and the anonymous actor identity."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from models import SettingsUpdate, UserSettings
from services.identity import generate_local_id, get_anonymous_user_id, resolve_user_id
from services.preferences import SettingsManager
from storage import StorageUnavailableError


@pytest.fixture()
def fallback_path(tmp_path):
    return tmp_path / "settings_fallback.json"


class TestSettingsManager:
    def test_load_and_save_through_storage(self, storage, fallback_path):
        manager = SettingsManager(storage, "user-1", fallback_path)

        assert manager.load().bell_sound == "tibetan"
        saved = manager.save(SettingsUpdate(volume=15))

        assert saved.volume == 15
        assert storage.get_settings("user-1").volume == 15
        assert not fallback_path.exists()

    def test_load_falls_back_to_defaults(self, broken_storage, fallback_path):
        settings = SettingsManager(broken_storage, "user-1", fallback_path).load()

        assert settings == UserSettings(user_id="user-1")

    def test_load_falls_back_to_last_good_value(self, fallback_path):
        storage = MagicMock()
        storage.get_settings.side_effect = [
            UserSettings(id="s1", user_id="user-1", volume=70),
            StorageUnavailableError("down"),
        ]
        manager = SettingsManager(storage, "user-1", fallback_path)

        manager.load()

        assert manager.load().volume == 70

    def test_failed_save_writes_local_copy(self, broken_storage, fallback_path):
        manager = SettingsManager(broken_storage, "user-1", fallback_path)

        saved = manager.save(SettingsUpdate(volume=33, sound_enabled=False))

        assert saved.volume == 33
        assert json.loads(fallback_path.read_text())["volume"] == 33

        fresh = SettingsManager(broken_storage, "user-1", fallback_path)
        assert fresh.load().sound_enabled is False

    def test_unreadable_fallback_is_ignored(self, broken_storage, fallback_path):
        fallback_path.write_text("{not json")

        assert SettingsManager(broken_storage, None, fallback_path).load().volume == 50

    def test_clear_fallback(self, broken_storage, fallback_path):
        manager = SettingsManager(broken_storage, None, fallback_path)
        manager.save(SettingsUpdate(volume=1))

        manager.clear_fallback()

        assert not fallback_path.exists()
        assert manager.load().volume == 50


class TestIdentity:
    def test_anonymous_id_is_stable(self, tmp_path):
        path = tmp_path / "nested" / "anonymous_user_id"

        first = get_anonymous_user_id(path)

        assert first.startswith("anon_")
        assert get_anonymous_user_id(path) == first
        assert path.read_text() == first

    def test_explicit_user_id_wins(self, tmp_path):
        path = tmp_path / "anonymous_user_id"

        assert resolve_user_id("user-1", path) == "user-1"
        assert not path.exists()
        assert resolve_user_id(None, path).startswith("anon_")

    def test_local_id_format(self):
        prefix, millis, suffix = generate_local_id("session").split("_")

        assert prefix == "session"
        assert millis.isdigit()
        assert len(suffix) == 9

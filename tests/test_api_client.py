"""Tests for ApiStorage, the client-side storage over the HTTP surface."""

from __future__ import annotations

import httpx
import pytest

from models import SessionCreate, SessionUpdate, SettingsUpdate
from services.api_client import ApiStorage
from services.recorder import SessionRecorder
from storage import InvalidPayloadError, StorageUnavailableError


@pytest.fixture()
def api(client) -> ApiStorage:
    # TestClient is an httpx.Client bound to the in-process app
    return ApiStorage(client=client)


def failing_api(handler) -> ApiStorage:
    return ApiStorage(client=httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(handler)))


class TestAgainstApp:
    def test_session_lifecycle(self, api, preset):
        session = api.create_session(SessionCreate.from_preset(preset, "user-1"))

        assert api.get_session(session.id).preset_name == "Box Breathing"

        updated = api.update_session(session.id, SessionUpdate.finalized(session.duration, 50))
        assert updated.completed_duration == 300
        assert updated.is_completed is False

        assert [s.id for s in api.list_sessions("user-1")] == [session.id]
        assert api.delete_session(session.id) is True
        assert api.get_session(session.id) is None
        assert api.delete_session(session.id) is False

    def test_settings(self, api):
        assert api.get_settings("user-1").volume == 50

        saved = api.upsert_settings("user-1", SettingsUpdate(volume=75, bell_sound="gong"))

        assert saved.volume == 75
        assert api.get_settings("user-1").bell_sound == "gong"

    def test_recorder_over_http(self, api, storage, preset):
        recorder = SessionRecorder(api, user_id="user-1")

        session_id = recorder.begin(preset)
        result = recorder.finalize(session_id, 100)

        assert result.is_completed is True
        assert storage.get_session(session_id).completed_duration == 600


class TestFailures:
    def test_transport_error_is_unavailable(self, preset):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = failing_api(refuse)

        with pytest.raises(StorageUnavailableError):
            api.create_session(SessionCreate.from_preset(preset))
        with pytest.raises(StorageUnavailableError):
            api.list_sessions()

    def test_server_error_is_unavailable(self):
        api = failing_api(lambda request: httpx.Response(500, json={"detail": "Failed"}))

        with pytest.raises(StorageUnavailableError):
            api.get_settings()

    def test_client_error_is_invalid_payload(self):
        api = failing_api(lambda request: httpx.Response(400, json={"detail": "Invalid request data"}))

        with pytest.raises(InvalidPayloadError):
            api.upsert_settings(None, SettingsUpdate(volume=10))

    def test_recorder_degrades_when_server_unreachable(self, preset):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        recorder = SessionRecorder(failing_api(refuse))
        session_id = recorder.begin(preset)

        assert recorder.is_local(session_id)
        assert recorder.finalize(session_id, 100).is_completed is True

    def test_html_error_page_is_invalid_payload(self):
        api = failing_api(lambda request: httpx.Response(429, text="<html>Too Many Requests</html>"))

        with pytest.raises(InvalidPayloadError, match="Too Many Requests"):
            api.list_sessions()

    def test_garbled_success_body_is_unavailable(self):
        api = failing_api(lambda request: httpx.Response(200, text="<html>captive portal</html>"))

        with pytest.raises(StorageUnavailableError):
            api.get_settings()

    @pytest.mark.parametrize(
        "status, body",
        [
            (400, {"json": {"detail": "bad"}}),
            (429, {"text": "<html>Too Many Requests</html>"}),
        ],
    )
    def test_recorder_degrades_when_server_rejects(self, preset, status, body):
        recorder = SessionRecorder(failing_api(lambda request: httpx.Response(status, **body)))

        session_id = recorder.begin(preset)

        assert recorder.is_local(session_id)
        assert recorder.list_sessions() == []
        assert recorder.finalize(session_id, 50).completion_percentage == 50

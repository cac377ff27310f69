import logging
from typing import List, Optional

import httpx

from config import API_BASE_URL, API_PREFIX, API_TIMEOUT_SECONDS
from models import Session, SessionCreate, SessionUpdate, SettingsUpdate, UserSettings
from storage import InvalidPayloadError, StorageUnavailableError

logger = logging.getLogger(__name__)


class ApiStorage:
    """通过 HTTP 接口访问后端的存储实现，供客户端使用"""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        client: Optional[httpx.Client] = None,
        timeout: float = API_TIMEOUT_SECONDS,
    ):
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def __enter__(self) -> "ApiStorage":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def _request(self, method: str, path: str, **kwargs) -> Optional[httpx.Response]:
        """发送请求；404 返回 None"""
        try:
            response = self.client.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning("API request %s %s failed: %s", method, path, e)
            raise StorageUnavailableError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code >= 500:
            raise StorageUnavailableError(f"{method} {path} returned {response.status_code}")
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except (ValueError, AttributeError):
                # 代理或网关返回的 HTML 错误页
                detail = response.text
            raise InvalidPayloadError(f"{method} {path} rejected: {detail}")
        return response

    @staticmethod
    def _parse(response: httpx.Response, model):
        """解析响应体；无法识别的响应视为服务不可用"""
        try:
            data = response.json()
            if isinstance(data, list):
                return [model.model_validate(item) for item in data]
            return model.model_validate(data)
        except ValueError as e:
            raise StorageUnavailableError(f"Unexpected response from {response.request.url}: {e}") from e

    @staticmethod
    def _user_params(user_id: Optional[str]) -> dict:
        return {"userId": user_id} if user_id else {}

    def create_session(self, data: SessionCreate) -> Session:
        response = self._request(
            "POST", "/sessions", json=data.model_dump(mode="json", by_alias=True)
        )
        if response is None:
            raise StorageUnavailableError("Session endpoint not found")
        return self._parse(response, Session)

    def get_session(self, session_id: str) -> Optional[Session]:
        response = self._request("GET", f"/sessions/{session_id}")
        return self._parse(response, Session) if response else None

    def list_sessions(self, user_id: Optional[str] = None) -> List[Session]:
        response = self._request("GET", "/sessions", params=self._user_params(user_id))
        if response is None:
            return []
        return self._parse(response, Session)

    def update_session(self, session_id: str, updates: SessionUpdate) -> Optional[Session]:
        response = self._request(
            "PATCH",
            f"/sessions/{session_id}",
            json=updates.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return self._parse(response, Session) if response else None

    def delete_session(self, session_id: str) -> bool:
        return self._request("DELETE", f"/sessions/{session_id}") is not None

    def get_settings(self, user_id: Optional[str] = None) -> UserSettings:
        response = self._request("GET", "/settings", params=self._user_params(user_id))
        if response is None:
            return UserSettings(user_id=user_id)
        return self._parse(response, UserSettings)

    def upsert_settings(self, user_id: Optional[str], updates: SettingsUpdate) -> UserSettings:
        response = self._request(
            "PATCH",
            "/settings",
            params=self._user_params(user_id),
            json=updates.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        if response is None:
            raise StorageUnavailableError("Settings endpoint not found")
        return self._parse(response, UserSettings)

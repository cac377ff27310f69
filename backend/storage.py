"""会话与设置的存储层

路由层和客户端服务只依赖 SessionStorage 协议；MemoryStorage 用于开发和测试，
MongoStorage 用于持久化部署，客户端的 ApiStorage 见 services/api_client.py。
"""
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import STORAGE_BACKEND
from database import SESSIONS, USER_SETTINGS, connect, ensure_indexes
from models import (
    ANONYMOUS_KEY,
    Session,
    SessionCreate,
    SessionUpdate,
    SettingsCreate,
    SettingsUpdate,
    UserSettings,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class StorageUnavailableError(StorageError):
    """网络或数据库不可用"""


class InvalidPayloadError(StorageError):
    """请求数据被拒绝"""


class SessionStorage(Protocol):
    def create_session(self, data: SessionCreate) -> Session: ...

    def get_session(self, session_id: str) -> Optional[Session]: ...

    def list_sessions(self, user_id: Optional[str] = None) -> List[Session]: ...

    def update_session(self, session_id: str, updates: SessionUpdate) -> Optional[Session]: ...

    def delete_session(self, session_id: str) -> bool: ...

    def get_settings(self, user_id: Optional[str] = None) -> UserSettings: ...

    def upsert_settings(self, user_id: Optional[str], updates: SettingsUpdate) -> UserSettings: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _settings_key(user_id: Optional[str]) -> str:
    return user_id or ANONYMOUS_KEY


def new_session(data: SessionCreate) -> Session:
    """根据创建请求生成会话记录

    完成进度字段不直接落库，而是和 PATCH 一样经 apply_update 重新推导。
    """
    session = Session(
        **data.model_dump(exclude=set(SessionUpdate.model_fields)),
        id=str(uuid.uuid4()),
        started_at=_now(),
    )
    if data.completion_percentage or data.completed_duration or data.completed_at:
        session = session.apply_update(
            SessionUpdate(
                completed_duration=data.completed_duration or None,
                completion_percentage=data.completion_percentage or None,
                completed_at=data.completed_at,
            )
        )
    return session


class MemoryStorage:
    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._settings: Dict[str, UserSettings] = {}
        self._lock = threading.Lock()

    def create_session(self, data: SessionCreate) -> Session:
        session = new_session(data)
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def list_sessions(self, user_id: Optional[str] = None) -> List[Session]:
        with self._lock:
            sessions = list(self._sessions.values())
        if user_id:
            sessions = [s for s in sessions if s.user_id == user_id]
        else:
            sessions = [s for s in sessions if not s.user_id]
        return sorted(sessions, key=lambda s: s.started_at, reverse=True)

    def update_session(self, session_id: str, updates: SessionUpdate) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            updated = session.apply_update(updates)
            self._sessions[session_id] = updated
        return updated

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def get_settings(self, user_id: Optional[str] = None) -> UserSettings:
        settings = self._settings.get(_settings_key(user_id))
        return settings or UserSettings(user_id=user_id)

    def upsert_settings(self, user_id: Optional[str], updates: SettingsUpdate) -> UserSettings:
        key = _settings_key(user_id)
        changes = updates.model_dump(exclude_none=True)
        with self._lock:
            existing = self._settings.get(key)
            if existing is None:
                settings = UserSettings(
                    **changes, id=str(uuid.uuid4()), user_id=user_id, updated_at=_now()
                )
            else:
                settings = existing.model_copy(update={**changes, "updated_at": _now()})
            self._settings[key] = settings
        return settings


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # MongoDB 以 UTC 存储时间，未开启 tz_aware 时读出的是 naive 时间
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@contextmanager
def _mongo_errors():
    try:
        yield
    except PyMongoError as e:
        logger.error("MongoDB operation failed: %s", e)
        raise StorageUnavailableError(str(e)) from e


class MongoStorage:
    def __init__(self, db: Database):
        self.sessions = db[SESSIONS]
        self.user_settings = db[USER_SETTINGS]
        with _mongo_errors():
            ensure_indexes(db)

    @staticmethod
    def _to_session(doc: dict) -> Session:
        doc = dict(doc)
        doc["id"] = doc.pop("_id")
        doc["started_at"] = _aware(doc["started_at"])
        doc["completed_at"] = _aware(doc.get("completed_at"))
        return Session.model_validate(doc)

    @staticmethod
    def _to_settings(doc: dict) -> UserSettings:
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        doc.pop("user_key", None)
        doc["updated_at"] = _aware(doc.get("updated_at"))
        return UserSettings.model_validate(doc)

    def create_session(self, data: SessionCreate) -> Session:
        session = new_session(data)
        doc = session.model_dump(exclude={"id"})
        doc["_id"] = session.id
        with _mongo_errors():
            self.sessions.insert_one(doc)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        with _mongo_errors():
            doc = self.sessions.find_one({"_id": session_id})
        return self._to_session(doc) if doc else None

    def list_sessions(self, user_id: Optional[str] = None) -> List[Session]:
        query = {"user_id": user_id} if user_id else {"user_id": {"$in": [None, ""]}}
        with _mongo_errors():
            docs = list(self.sessions.find(query).sort("started_at", DESCENDING))
        return [self._to_session(doc) for doc in docs]

    def update_session(self, session_id: str, updates: SessionUpdate) -> Optional[Session]:
        session = self.get_session(session_id)
        if session is None:
            return None
        updated = session.apply_update(updates)
        with _mongo_errors():
            self.sessions.update_one(
                {"_id": session_id},
                {"$set": updated.model_dump(include=set(SessionUpdate.model_fields))},
            )
        return updated

    def delete_session(self, session_id: str) -> bool:
        with _mongo_errors():
            result = self.sessions.delete_one({"_id": session_id})
        return result.deleted_count > 0

    def get_settings(self, user_id: Optional[str] = None) -> UserSettings:
        with _mongo_errors():
            doc = self.user_settings.find_one({"user_key": _settings_key(user_id)})
        return self._to_settings(doc) if doc else UserSettings(user_id=user_id)

    def upsert_settings(self, user_id: Optional[str], updates: SettingsUpdate) -> UserSettings:
        changes = updates.model_dump(exclude_none=True)
        defaults = SettingsCreate(user_id=user_id).model_dump(exclude=set(changes))
        with _mongo_errors():
            doc = self.user_settings.find_one_and_update(
                {"user_key": _settings_key(user_id)},
                {
                    "$set": {**changes, "updated_at": _now()},
                    "$setOnInsert": defaults,
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        return self._to_settings(doc)


def create_storage(backend: str = STORAGE_BACKEND) -> SessionStorage:
    """按配置创建存储实例"""
    if backend == "memory":
        return MemoryStorage()
    if backend == "mongo":
        return MongoStorage(connect())
    raise ValueError(f"Unknown storage backend: {backend}")

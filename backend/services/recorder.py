import logging
from datetime import datetime, timezone
from typing import List, Optional, Set

from models import Preset, Session, SessionCreate, SessionUpdate
from services.identity import generate_local_id
from storage import SessionStorage, StorageError

logger = logging.getLogger(__name__)


class SessionRecorder:
    """记录一次练习：开始时创建会话，结束时写入一次完成情况

    存储不可用时退化为本地会话，倒计时不受影响。
    """

    def __init__(self, storage: SessionStorage, user_id: Optional[str] = None):
        self.storage = storage
        self.user_id = user_id
        self._active: Optional[Session] = None
        self._local_ids: Set[str] = set()

    @property
    def active_session_id(self) -> Optional[str]:
        return self._active.id if self._active else None

    @property
    def active_session(self) -> Optional[Session]:
        return self._active

    def is_local(self, session_id: str) -> bool:
        return session_id in self._local_ids

    def begin(self, preset: Preset) -> str:
        data = SessionCreate.from_preset(preset, self.user_id)
        try:
            session = self.storage.create_session(data)
        except StorageError as e:
            logger.warning("Failed to start session, continuing offline: %s", e)
            session = Session(
                **data.model_dump(),
                id=generate_local_id("session"),
                started_at=datetime.now(timezone.utc),
            )
            self._local_ids.add(session.id)

        self._active = session
        logger.info("Started session %s (%s)", session.id, preset.name)
        return session.id

    def finalize(self, session_id: str, completion_percentage: int) -> Optional[Session]:
        """结束会话，每个会话只应调用一次"""
        active = self._active
        if active is None or active.id != session_id:
            logger.warning(
                "Session ID mismatch: finalize(%s) but active is %s",
                session_id,
                active.id if active else None,
            )
            return None

        self._active = None
        update = SessionUpdate.finalized(active.duration, completion_percentage)

        if self.is_local(session_id):
            logger.info("Finalized offline session %s at %s%%", session_id, update.completion_percentage)
            return active.apply_update(update)

        try:
            session = self.storage.update_session(session_id, update)
        except StorageError as e:
            logger.error("Failed to complete session %s: %s", session_id, e)
            return None

        if session is None:
            logger.warning("Session %s no longer exists", session_id)
            return None
        logger.info("Completed session %s at %s%%", session_id, session.completion_percentage)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        try:
            return self.storage.get_session(session_id)
        except StorageError as e:
            logger.error("Failed to fetch session %s: %s", session_id, e)
            return None

    def list_sessions(self) -> List[Session]:
        try:
            return self.storage.list_sessions(self.user_id)
        except StorageError as e:
            logger.error("Failed to fetch sessions: %s", e)
            return []

    def recent_sessions(self, limit: int = 10) -> List[Session]:
        return self.list_sessions()[:limit]

    def clear_all_data(self) -> int:
        """删除当前用户的全部会话，返回删除数量"""
        deleted = 0
        try:
            for session in self.storage.list_sessions(self.user_id):
                if self.storage.delete_session(session.id):
                    deleted += 1
        except StorageError as e:
            logger.error("Failed to clear data: %s", e)
        self._active = None
        self._local_ids.clear()
        logger.info("Cleared %d sessions", deleted)
        return deleted

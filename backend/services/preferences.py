import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from config import SETTINGS_FALLBACK_PATH
from models import SettingsUpdate, UserSettings
from storage import SessionStorage, StorageError

logger = logging.getLogger(__name__)


class SettingsManager:
    """读写用户设置；存储不可用时依次使用缓存、本地备份文件和默认值"""

    def __init__(
        self,
        storage: SessionStorage,
        user_id: Optional[str] = None,
        fallback_path: Path = SETTINGS_FALLBACK_PATH,
    ):
        self.storage = storage
        self.user_id = user_id
        self.fallback_path = Path(fallback_path)
        self._cached: Optional[UserSettings] = None

    def load(self) -> UserSettings:
        try:
            settings = self.storage.get_settings(self.user_id)
        except StorageError as e:
            logger.warning("Failed to fetch settings: %s", e)
            return self._cached or self._read_fallback() or UserSettings(user_id=self.user_id)

        self._cached = settings
        return settings

    def save(self, updates: SettingsUpdate) -> UserSettings:
        try:
            settings = self.storage.upsert_settings(self.user_id, updates)
        except StorageError as e:
            logger.warning("Failed to save settings, keeping local copy: %s", e)
            base = self._cached or self._read_fallback() or UserSettings(user_id=self.user_id)
            settings = base.model_copy(update=updates.model_dump(exclude_none=True))
            self._write_fallback(settings)
        else:
            logger.info("Settings saved")

        self._cached = settings
        return settings

    def _read_fallback(self) -> Optional[UserSettings]:
        if not self.fallback_path.exists():
            return None
        try:
            data = json.loads(self.fallback_path.read_text(encoding="utf-8"))
            preferences = SettingsUpdate.model_validate(data).model_dump(exclude_none=True)
            return UserSettings(user_id=self.user_id, **preferences)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable settings fallback %s: %s", self.fallback_path, e)
            return None

    def _write_fallback(self, settings: UserSettings) -> None:
        self.fallback_path.parent.mkdir(parents=True, exist_ok=True)
        self.fallback_path.write_text(json.dumps(settings.preferences()), encoding="utf-8")

    def clear_fallback(self) -> None:
        self.fallback_path.unlink(missing_ok=True)
        self._cached = None

from datetime import datetime
from typing import Optional

from pydantic import Field

from .session import CamelModel

ANONYMOUS_KEY = "anonymous"  # 未登录用户的设置键


class SettingsUpdate(CamelModel):
    interval_bells: Optional[bool] = None
    interval_duration: Optional[int] = Field(default=None, ge=1, description="提示钟间隔（分钟）")
    sound_enabled: Optional[bool] = None
    bell_sound: Optional[str] = Field(default=None, min_length=1)
    volume: Optional[int] = Field(default=None, ge=0, le=100)
    visual_cues: Optional[bool] = None
    auto_fade_interface: Optional[bool] = None
    fade_duration: Optional[int] = Field(default=None, ge=0, description="界面淡出秒数")


class SettingsCreate(CamelModel):
    user_id: Optional[str] = None
    interval_bells: bool = False
    interval_duration: int = Field(default=5, ge=1)
    sound_enabled: bool = True
    bell_sound: str = Field(default="tibetan", min_length=1)
    volume: int = Field(default=50, ge=0, le=100)
    visual_cues: bool = True
    auto_fade_interface: bool = True
    fade_duration: int = Field(default=10, ge=0)


class UserSettings(SettingsCreate):
    id: Optional[str] = None  # 尚未保存的默认设置没有 id
    updated_at: Optional[datetime] = None

    @property
    def actor_key(self) -> str:
        return self.user_id or ANONYMOUS_KEY

    def preferences(self) -> dict:
        """仅返回偏好字段"""
        return self.model_dump(include=set(SettingsUpdate.model_fields))

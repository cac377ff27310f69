from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from config import COMPLETION_THRESHOLD

PresetType = Literal["breathing", "meditation"]


class CamelModel(BaseModel):
    """JSON 使用驼峰字段名，Python 侧使用下划线字段名"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def completion_percentage(completed_seconds: float, duration_seconds: float) -> int:
    """完成百分比，四舍五入并限制在 [0, 100]"""
    if duration_seconds <= 0:
        return 100
    percentage = round(completed_seconds / duration_seconds * 100)
    return max(0, min(100, percentage))


class Preset(CamelModel):
    id: str
    name: str
    description: str = ""
    type: PresetType
    duration: int = Field(gt=0, description="预设时长（分钟）")
    technique: Optional[str] = None  # box, 4-7-8, body-scan ...
    benefits: List[str] = Field(default_factory=list)


class SessionCreate(CamelModel):
    user_id: Optional[str] = None
    preset_name: str = Field(min_length=1)
    preset_type: PresetType
    technique: Optional[str] = None
    duration: int = Field(gt=0)  # 秒
    completed_duration: int = Field(default=0, ge=0)
    completion_percentage: int = Field(default=0, ge=0, le=100)
    is_completed: bool = False
    completed_at: Optional[datetime] = None

    @classmethod
    def from_preset(cls, preset: Preset, user_id: Optional[str] = None) -> "SessionCreate":
        """开始练习时冻结预设信息，之后修改预设不会改写历史"""
        return cls(
            user_id=user_id,
            preset_name=preset.name,
            preset_type=preset.type,
            technique=preset.technique,
            duration=preset.duration * 60,
        )


class SessionUpdate(CamelModel):
    """PATCH 白名单字段，其余字段会被忽略"""

    completed_duration: Optional[int] = Field(default=None, ge=0)
    completion_percentage: Optional[int] = Field(default=None, ge=0, le=100)
    is_completed: Optional[bool] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def finalized(
        cls, duration: int, percentage: int, now: Optional[datetime] = None
    ) -> "SessionUpdate":
        percentage = max(0, min(100, int(percentage)))
        return cls(
            completed_duration=round(duration * percentage / 100),
            completion_percentage=percentage,
            is_completed=percentage >= COMPLETION_THRESHOLD,
            completed_at=now or datetime.now(timezone.utc),
        )


class Session(SessionCreate):
    id: str
    started_at: datetime

    @property
    def is_finalized(self) -> bool:
        return self.completed_at is not None

    def apply_update(self, update: SessionUpdate) -> "Session":
        """应用更新，并重新计算相关字段以保持完成率与完成时长一致"""
        changes = update.model_dump(exclude_none=True)
        if update.completion_percentage is not None:
            percentage = update.completion_percentage
            changes["completed_duration"] = round(self.duration * percentage / 100)
        elif update.completed_duration is not None:
            percentage = completion_percentage(update.completed_duration, self.duration)
            changes["completion_percentage"] = percentage
        else:
            # 完成状态只能由完成时长推导
            changes.pop("is_completed", None)
            return self.model_copy(update=changes)

        changes["is_completed"] = percentage >= COMPLETION_THRESHOLD
        changes.setdefault("completed_at", datetime.now(timezone.utc))
        return self.model_copy(update=changes)

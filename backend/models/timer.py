from enum import Enum
from typing import Literal, Union

from .session import CamelModel


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"


class TimerStarted(CamelModel):
    type: Literal["started"] = "started"
    time_remaining: int  # 秒，向上取整


class TimerTick(CamelModel):
    type: Literal["tick"] = "tick"
    time_remaining: int
    is_complete: bool = False


class TimerPaused(CamelModel):
    type: Literal["paused"] = "paused"
    time_remaining: int


class TimerStopped(CamelModel):
    type: Literal["stopped"] = "stopped"
    time_remaining: int


class TimerComplete(CamelModel):
    type: Literal["complete"] = "complete"


TimerEvent = Union[TimerStarted, TimerTick, TimerPaused, TimerStopped, TimerComplete]

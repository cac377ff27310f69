# Models package
from .session import (
    COMPLETION_THRESHOLD,
    Preset,
    Session,
    SessionCreate,
    SessionUpdate,
    completion_percentage,
)
from .settings import SettingsCreate, SettingsUpdate, UserSettings, ANONYMOUS_KEY
from .stats import SessionStats
from .timer import (
    TimerState,
    TimerStarted,
    TimerTick,
    TimerPaused,
    TimerStopped,
    TimerComplete,
    TimerEvent,
)

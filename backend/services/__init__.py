# Services package
from .countdown import CountdownEngine
from .recorder import SessionRecorder
from .stats import StatsService, compute_stats
from .preferences import SettingsManager
from .practice import PracticeRunner

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Set

from models import Session, SessionStats
from storage import SessionStorage, StorageError

logger = logging.getLogger(__name__)


def _local(value: datetime) -> datetime:
    """转换为本地时间（naive 时间视为本地时间）"""
    return value.astimezone()


def practice_days(sessions: Iterable[Session]) -> Set[date]:
    """有练习记录的本地日期集合"""
    return {_local(s.started_at).date() for s in sessions}


def current_streak(days: Set[date], today: date) -> int:
    """计算截止到今天（今天没有则从昨天算起）的连续天数"""
    if today in days:
        day = today
    elif today - timedelta(days=1) in days:
        day = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while day in days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(days: Set[date]) -> int:
    """计算历史最长连续天数"""
    if not days:
        return 0

    sorted_days = sorted(days)
    longest = 1
    run = 1
    for previous, current in zip(sorted_days, sorted_days[1:]):
        if (current - previous).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def week_start(today: date) -> date:
    """本周开始日期（周日）"""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def favorite_practice(sessions: List[Session]) -> str:
    # 次数相同时取最先出现的
    counts = Counter(s.technique or s.preset_name for s in sessions)
    if not counts:
        return "None"
    return counts.most_common(1)[0][0]


def format_time_ago(value: datetime, now: datetime) -> str:
    hours = int((now - value).total_seconds() // 3600)
    days = hours // 24

    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if days < 7:
        return f"{days} day{'' if days == 1 else 's'} ago"
    return _local(value).strftime("%x")


def compute_stats(sessions: Iterable[Session], now: Optional[datetime] = None) -> SessionStats:
    """根据会话历史计算统计数据，只统计已完成的练习"""
    completed = [s for s in sessions if s.is_completed]
    if not completed:
        return SessionStats.empty()

    now = _local(now or datetime.now().astimezone())
    today = now.date()
    days = practice_days(completed)

    total_seconds = sum(s.completed_duration for s in completed)
    sunday = week_start(today)
    this_week = sum(1 for s in completed if _local(s.started_at).date() >= sunday)

    last = max(completed, key=lambda s: s.completed_at or s.started_at)
    last_at = _local(last.completed_at or last.started_at)

    return SessionStats(
        total_sessions=len(completed),
        total_minutes=round(total_seconds / 60),
        current_streak=current_streak(days, today),
        longest_streak=longest_streak(days),
        this_week=this_week,
        favorite_type=favorite_practice(completed),
        last_session=format_time_ago(last_at, now),
    )


class StatsService:
    """每次请求都重新计算统计；存储不可用时返回上一次的结果"""

    def __init__(self, storage: SessionStorage, user_id: Optional[str] = None):
        self.storage = storage
        self.user_id = user_id
        self._last_good: Optional[SessionStats] = None

    def get_stats(self, now: Optional[datetime] = None) -> SessionStats:
        try:
            sessions = self.storage.list_sessions(self.user_id)
        except StorageError as e:
            logger.warning("Failed to fetch sessions for stats: %s", e)
            return self._last_good or SessionStats.empty()

        stats = compute_stats(sessions, now)
        self._last_good = stats
        return stats

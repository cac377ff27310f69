from .session import CamelModel


class SessionStats(CamelModel):
    total_sessions: int  # 已完成的练习次数
    total_minutes: int
    current_streak: int  # 当前连续练习天数
    longest_streak: int  # 历史最长连续天数
    this_week: int  # 本周（周日开始）完成次数
    favorite_type: str
    last_session: str  # 最近一次练习的相对时间

    @classmethod
    def empty(cls) -> "SessionStats":
        return cls(
            total_sessions=0,
            total_minutes=0,
            current_streak=0,
            longest_streak=0,
            this_week=0,
            favorite_type="None",
            last_session="Never",
        )

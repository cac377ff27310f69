"""倒计时引擎

剩余时间始终由时钟差值计算（已累计时长 + 本次运行时长），不按 tick 递减，
因此即使 tick 被延迟，下一次 tick 也会一步追上真实时间。tick 由独立的守护线程
产生，事件通过 events 队列单向传递给使用方。
"""
import logging
import math
import queue
import threading
import time
from typing import Callable, Optional

from config import TICK_INTERVAL_SECONDS
from models import (
    TimerComplete,
    TimerEvent,
    TimerPaused,
    TimerStarted,
    TimerState,
    TimerStopped,
    TimerTick,
)

logger = logging.getLogger(__name__)


class CountdownEngine:
    def __init__(
        self,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        threaded: bool = True,
    ):
        self.tick_interval = tick_interval
        self.events: "queue.Queue[TimerEvent]" = queue.Queue()
        self._clock = clock
        self._threaded = threaded
        self._lock = threading.RLock()
        self._state = TimerState.IDLE
        self._duration = 0.0
        self._remaining = 0.0
        self._accumulated = 0.0  # 之前各段运行累计的秒数
        self._anchor: Optional[float] = None  # 本段运行开始的时钟读数
        self._thread: Optional[threading.Thread] = None
        self._closed = threading.Event()

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def time_remaining(self) -> int:
        with self._lock:
            if self._state == TimerState.RUNNING:
                return math.ceil(max(0.0, self._duration - self._elapsed_now()))
            return math.ceil(self._remaining)

    @property
    def elapsed(self) -> float:
        with self._lock:
            if self._state == TimerState.RUNNING:
                return min(self._duration, self._elapsed_now())
            return self._accumulated

    def _elapsed_now(self) -> float:
        return self._accumulated + (self._clock() - self._anchor)

    def _emit(self, event: TimerEvent) -> None:
        self.events.put(event)

    def next_event(self, timeout: Optional[float] = None) -> Optional[TimerEvent]:
        try:
            return self.events.get(timeout=timeout)
        except queue.Empty:
            return None

    def start(self, duration: Optional[float] = None) -> None:
        """开始倒计时；暂停状态下不传时长则从剩余时间继续"""
        with self._lock:
            if self._state == TimerState.RUNNING:
                logger.debug("start() ignored, countdown already running")
                return

            if duration is None and self._state == TimerState.PAUSED:
                self._anchor = self._clock()
            else:
                if duration is None:
                    duration = self._duration
                self._duration = float(duration)
                self._remaining = self._duration
                self._accumulated = 0.0
                self._anchor = None
                if self._duration <= 0:
                    self._remaining = 0.0
                    self._state = TimerState.COMPLETE
                    self._emit(TimerComplete())
                    return
                self._anchor = self._clock()

            self._state = TimerState.RUNNING
            self._emit(TimerStarted(time_remaining=math.ceil(self._remaining)))
        self._ensure_worker()

    def pause(self) -> None:
        with self._lock:
            if self._state != TimerState.RUNNING:
                return
            self.tick()
            if self._state != TimerState.RUNNING:
                return
            self._accumulated = self._elapsed_now()
            self._anchor = None
            self._remaining = max(0.0, self._duration - self._accumulated)
            self._state = TimerState.PAUSED
            self._emit(TimerPaused(time_remaining=math.ceil(self._remaining)))

    def stop(self) -> None:
        """停止并把剩余时间恢复为完整时长"""
        with self._lock:
            was_active = self._state in (TimerState.RUNNING, TimerState.PAUSED)
            self._state = TimerState.IDLE
            self._remaining = self._duration
            self._accumulated = 0.0
            self._anchor = None
            if was_active:
                self._emit(TimerStopped(time_remaining=math.ceil(self._remaining)))

    reset = stop

    def tick(self) -> Optional[TimerTick]:
        with self._lock:
            if self._state != TimerState.RUNNING:
                return None
            self._remaining = max(0.0, self._duration - self._elapsed_now())
            event = TimerTick(
                time_remaining=math.ceil(self._remaining),
                is_complete=self._remaining <= 0,
            )
            self._emit(event)
            if self._remaining <= 0:
                self._accumulated = self._duration
                self._anchor = None
                self._state = TimerState.COMPLETE
                self._emit(TimerComplete())
            return event

    def _ensure_worker(self) -> None:
        if not self._threaded or self._closed.is_set():
            return
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name="countdown-engine", daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while not self._closed.wait(self.tick_interval):
            self.tick()

    def close(self) -> None:
        self._closed.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
            self._thread = None

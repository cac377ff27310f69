import logging
import threading
from typing import Callable, Optional

from models import Preset, Session, TimerComplete, TimerEvent, TimerStopped, completion_percentage
from services.countdown import CountdownEngine
from services.recorder import SessionRecorder

logger = logging.getLogger(__name__)


class PracticeRunner:
    """把倒计时和会话记录串起来：自然结束记 100%，手动停止按实际时长记录"""

    def __init__(self, recorder: SessionRecorder, engine: Optional[CountdownEngine] = None):
        self.recorder = recorder
        self.engine = engine or CountdownEngine()
        self.session_id: Optional[str] = None
        self.result: Optional[Session] = None
        self._lock = threading.Lock()

    def begin(self, preset: Preset) -> str:
        if self.session_id is not None:
            logger.warning("Practice %s already in progress", self.session_id)
            return self.session_id

        self.result = None
        self.session_id = self.recorder.begin(preset)
        self.engine.start(preset.duration * 60)
        return self.session_id

    def pause(self) -> None:
        self.engine.pause()

    def resume(self) -> None:
        self.engine.start()

    def stop(self) -> Optional[Session]:
        if self.session_id is None:
            return None
        percentage = completion_percentage(self.engine.elapsed, self.engine.duration)
        self.engine.stop()
        return self._finish(percentage)

    def handle(self, event: TimerEvent) -> None:
        if isinstance(event, TimerComplete) and self.session_id is not None:
            self._finish(100)

    def _finish(self, percentage: int) -> Optional[Session]:
        # stop() 与 run() 可能在不同线程同时结束同一次练习
        with self._lock:
            session_id, self.session_id = self.session_id, None
            if session_id is None:
                return self.result
            self.result = self.recorder.finalize(session_id, percentage)
            return self.result

    def run(
        self,
        timeout: Optional[float] = None,
        on_event: Optional[Callable[[TimerEvent], None]] = None,
    ) -> Optional[Session]:
        """消费事件直到练习结束；timeout 内没有新事件则返回"""
        while True:
            event = self.engine.next_event(timeout)
            if event is None:
                return self.result
            if on_event is not None:
                on_event(event)
            self.handle(event)
            if isinstance(event, (TimerComplete, TimerStopped)):
                return self.result

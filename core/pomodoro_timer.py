"""
Pomodoro Timer
Counts down work sessions and breaks, one second per tick, and publishes
the worked time on the event bus.
"""
import time
from typing import Callable, Optional
from PyQt5.QtCore import QObject
from core.event_bus import event_bus
from core.periodic_callback import PeriodicCallback
from core.worker_interval import WorkerInterval
from data.models import ProjectOption, SessionRecord, SessionType, TimerPhase
from utils.config_manager import config
from utils.logger import logger


class PomodoroTimer(QObject):
    """Session/break countdown driven by a periodic callback."""

    def __init__(self, scheduler: WorkerInterval, clock: Callable[[], float] = time.time):
        super().__init__()
        self.session_minutes = config.get('pomodoro.session_minutes', 25)
        self.break_minutes = config.get('pomodoro.break_minutes', 5)
        self.long_break_minutes = config.get('pomodoro.long_break_minutes', 15)
        self.long_break_every = max(1, int(config.get('pomodoro.long_break_every', 4)))
        self.tick_ms = config.get('pomodoro.tick_ms', 1000)

        self._clock = clock
        self._ticker = PeriodicCallback(scheduler, self._tick)

        self.phase = TimerPhase.SESSION
        self.remaining_seconds = self.phase_seconds(self.phase)
        self.completed_sessions = 0
        self.project: Optional[ProjectOption] = None
        self.database_id = ""

        self._segment_start: Optional[int] = None
        self._segment_seconds = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._ticker.is_active

    def phase_seconds(self, phase: TimerPhase) -> int:
        """Full length of a phase in seconds."""
        minutes = {
            TimerPhase.SESSION: self.session_minutes,
            TimerPhase.BREAK: self.break_minutes,
            TimerPhase.LONG_BREAK: self.long_break_minutes,
        }[phase]
        return int(round(minutes * 60))

    @property
    def clockified(self) -> str:
        """Remaining time as MM:SS."""
        minutes, seconds = divmod(max(self.remaining_seconds, 0), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def set_project(self, project: Optional[ProjectOption], database_id: str = ""):
        """Choose the project worked time is booked against."""
        self.project = project
        self.database_id = database_id

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def start(self):
        if self.is_running:
            return
        if self.remaining_seconds <= 0:
            self.remaining_seconds = self.phase_seconds(self.phase)

        self._segment_start = self._now()
        self._segment_seconds = 0
        self._ticker.set_interval(self.tick_ms)
        logger.info(f"{self.phase.value} started ({self.clockified} left)")
        event_bus.timer_started.emit(self.phase.value)

    def pause(self):
        if not self.is_running:
            return
        self._ticker.set_interval(None)
        if self.phase.is_work:
            self._log_work()
        logger.info(f"{self.phase.value} paused at {self.clockified}")
        event_bus.timer_paused.emit(self.phase.value)

    def toggle(self):
        """Play/pause."""
        if self.is_running:
            self.pause()
        else:
            self.start()

    def reset(self):
        """Stop and restore the full length of the current phase."""
        was_running = self.is_running
        self._ticker.set_interval(None)
        if was_running and self.phase.is_work:
            self._log_work()
        self.remaining_seconds = self.phase_seconds(self.phase)
        self._segment_start = None
        self._segment_seconds = 0
        event_bus.timer_reset.emit(self.phase.value)

    def restart(self):
        """Go back to a fresh work session and start it."""
        self.reset()
        self.phase = TimerPhase.SESSION
        self.remaining_seconds = self.phase_seconds(self.phase)
        self.start()

    def close(self):
        """Stop ticking without logging anything."""
        self._ticker.close()

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def _tick(self):
        self.remaining_seconds -= 1
        self._segment_seconds += 1
        event_bus.timer_ticked.emit(self.phase.value, self.remaining_seconds)
        if self.remaining_seconds <= 0:
            self._finish_phase()

    def _finish_phase(self):
        finished = self.phase
        logger.info(f"{finished.value} completed")
        event_bus.phase_completed.emit(finished.value)

        if finished.is_work:
            self.completed_sessions += 1
            record = self._log_work()
            if record is not None:
                event_bus.session_completed.emit(record)
            if self.completed_sessions % self.long_break_every == 0:
                self.phase = TimerPhase.LONG_BREAK
            else:
                self.phase = TimerPhase.BREAK
        else:
            self.phase = TimerPhase.SESSION

        # Keep running into the next phase
        self.remaining_seconds = self.phase_seconds(self.phase)
        self._segment_start = self._now()
        self._segment_seconds = 0
        event_bus.phase_changed.emit(self.phase.value)

    def _log_work(self) -> Optional[SessionRecord]:
        """Publish the work done since the last logged segment."""
        if self._segment_start is None or self._segment_seconds <= 0:
            return None

        record = SessionRecord(
            project_id=self.project.value if self.project else "",
            project_title=self.project.label if self.project else "",
            start_time=self._segment_start,
            end_time=self._now(),
            duration_seconds=self._segment_seconds,
            database_id=self.database_id,
            session_type=SessionType.WORK,
        )
        self._segment_start = self._now()
        self._segment_seconds = 0
        event_bus.work_logged.emit(record)
        return record

    def _now(self) -> int:
        return int(self._clock())

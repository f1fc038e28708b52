"""
Interval Worker
Runs repeating timers inside a dedicated thread and reports every tick back
to the host thread as a message.
"""
import math
from typing import Dict, List, Optional
from PyQt5.QtCore import (
    QCoreApplication, QMetaObject, QObject, QThread, QTimer, Qt,
    pyqtSignal, pyqtSlot,
)
from data.models import ScheduledTimer
from utils.logger import logger

SET_INTERVAL = "setInterval"
CLEAR_INTERVAL = "clearInterval"
RUN_CALLBACK = "runCallback"

# QTimer periods are signed 32-bit milliseconds
MAX_DELAY_MS = 2 ** 31 - 1


def coerce_delay(value) -> Optional[int]:
    """Whole-millisecond period for value, or None if Qt cannot run it.

    Fractions round up so a sub-millisecond period never becomes a 0ms timer.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0 or value > MAX_DELAY_MS:
        return None
    return int(math.ceil(value))


class ContextUnavailableError(Exception):
    """Background execution context could not be created."""
    pass


class IntervalWorker(QObject):
    """
    Timer owner living in the background thread.

    Messages in:  {"id", "name": "setInterval", "delay"} / {"id", "name": "clearInterval"}
    Messages out: {"id", "name": "runCallback"} once per tick
    """

    message = pyqtSignal(dict)

    def __init__(self):
        super().__init__()
        self._timers: Dict[str, QTimer] = {}

    @pyqtSlot(dict)
    def handle_message(self, payload):
        """Dispatch one host message. Malformed payloads are ignored."""
        if not isinstance(payload, dict):
            return
        name = payload.get("name")
        timer_id = payload.get("id")
        if not name or not isinstance(timer_id, str) or not timer_id:
            return

        if name == SET_INTERVAL:
            delay = coerce_delay(payload.get("delay"))
            if delay is None:
                return
            self._set_interval(timer_id, delay)
        elif name == CLEAR_INTERVAL:
            self._clear_interval(timer_id)

    def _set_interval(self, timer_id: str, delay: int):
        # A second setInterval for a live id replaces the running timer
        self._clear_interval(timer_id)

        timer = QTimer(self)
        timer.setTimerType(Qt.PreciseTimer)
        timer.timeout.connect(lambda: self.message.emit({"id": timer_id, "name": RUN_CALLBACK}))
        timer.start(delay)
        self._timers[timer_id] = timer

    def _clear_interval(self, timer_id: str):
        timer = self._timers.pop(timer_id, None)
        if timer is not None:
            timer.stop()
            timer.deleteLater()

    @pyqtSlot()
    def stop_all(self):
        """Stop every timer owned by this worker."""
        for timer in self._timers.values():
            timer.stop()
            timer.deleteLater()
        self._timers.clear()

    @property
    def active_ids(self):
        return list(self._timers.keys())

    @property
    def scheduled(self) -> List[ScheduledTimer]:
        """Live timers with their periods."""
        return [ScheduledTimer(id=timer_id, interval_ms=timer.interval())
                for timer_id, timer in self._timers.items()]


class BackgroundContext(QObject):
    """
    Owns the worker thread and the message channel to it.

    Construction raises ContextUnavailableError when a background thread
    cannot be used.
    """

    post = pyqtSignal(dict)

    def __init__(self, thread_name: str = "IntervalWorker"):
        super().__init__()
        if QCoreApplication.instance() is None:
            raise ContextUnavailableError("no Qt application instance")

        self._thread: Optional[QThread] = QThread()
        self._thread.setObjectName(thread_name)
        self.worker = IntervalWorker()
        self.worker.moveToThread(self._thread)
        self.post.connect(self.worker.handle_message)
        self._thread.finished.connect(self.worker.deleteLater)

        self._thread.start()
        if not self._thread.isRunning():
            self._thread = None
            raise ContextUnavailableError("interval worker thread did not start")

    @property
    def message(self):
        """Tick messages coming back from the worker."""
        return self.worker.message

    def post_message(self, payload: dict):
        """Queue a message for the worker. Never blocks on a reply."""
        self.post.emit(payload)

    def release(self, timeout_ms: int = 2000):
        """Stop all worker timers, then stop and join the thread."""
        if self._thread is None:
            return
        if self._thread.isRunning():
            QMetaObject.invokeMethod(self.worker, "stop_all", Qt.BlockingQueuedConnection)
            self._thread.quit()
            if not self._thread.wait(timeout_ms):
                logger.warning("Interval worker thread did not stop in time")
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

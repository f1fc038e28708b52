"""
Worker Interval
Set/clear periodic callbacks, preferring timers in a background thread and
falling back to host-thread timers when that thread is unavailable.
"""
import itertools
from typing import Callable, Dict, Optional, Union
from PyQt5.QtCore import QObject, QTimerEvent, Qt
from core.interval_worker import (
    BackgroundContext, ContextUnavailableError, MAX_DELAY_MS, coerce_delay,
    SET_INTERVAL, CLEAR_INTERVAL, RUN_CALLBACK,
)
from utils.config_manager import config
from utils.logger import logger

# str handles belong to the background thread, int handles to host timers
Handle = Union[str, int]


class WorkerInterval(QObject):
    """Host-side facade over the interval worker."""

    def __init__(self, context_factory: Optional[Callable[[], BackgroundContext]] = None):
        super().__init__()
        self._context_factory = context_factory or BackgroundContext
        self._context: Optional[BackgroundContext] = None
        self._initialized = False
        self._ids = itertools.count(1)
        self._callbacks: Dict[str, Callable[[], None]] = {}
        self._native_callbacks: Dict[int, Callable[[], None]] = {}

    def initialize(self):
        """Start the background context once; degrade to host timers on failure."""
        if self._initialized:
            return
        self._initialized = True

        try:
            if not config.get('scheduler.background_timers', True):
                raise ContextUnavailableError("background timers disabled in config")
            context = self._context_factory()
        except Exception as e:
            if not config.is_production:
                logger.warning(f"Interval worker init failed; falling back to host timers: {e}")
            self._context = None
            return

        context.message.connect(self._on_context_message)
        self._context = context
        logger.debug("Interval worker started")

    @property
    def uses_background(self) -> bool:
        return self._context is not None

    def schedule(self, callback: Callable[[], None], interval_ms: Optional[float]) -> Optional[Handle]:
        """
        Run callback every interval_ms milliseconds.

        Args:
            callback: Zero-argument callable
            interval_ms: Non-negative period, or None for no timer. Fractions
                round up to the next whole millisecond.

        Returns:
            A str handle (background thread), an int handle (host timer),
            or None when interval_ms is None
        """
        if interval_ms is None:
            return None
        delay = coerce_delay(interval_ms)
        if delay is None:
            raise ValueError(f"interval must be a finite number of ms in [0, {MAX_DELAY_MS}], got {interval_ms!r}")

        if self._context is not None:
            timer_id = f"interval-{next(self._ids)}"
            self._callbacks[timer_id] = callback
            self._context.post_message({"id": timer_id, "name": SET_INTERVAL, "delay": delay})
            return timer_id

        handle = self.startTimer(delay, Qt.PreciseTimer)
        if handle == 0:
            logger.error(f"Could not start host timer with interval {delay}ms")
            return None
        self._native_callbacks[handle] = callback
        return handle

    def set_callback(self, handle: Optional[Handle], callback: Callable[[], None]) -> bool:
        """Replace the callback run by a live timer without restarting it."""
        if isinstance(handle, str) and handle in self._callbacks:
            self._callbacks[handle] = callback
            return True
        if isinstance(handle, int) and handle in self._native_callbacks:
            self._native_callbacks[handle] = callback
            return True
        return False

    def cancel(self, handle: Optional[Handle]):
        """Stop a timer. Unknown or already cancelled handles are ignored."""
        if isinstance(handle, str):
            if self._callbacks.pop(handle, None) is not None and self._context is not None:
                self._context.post_message({"id": handle, "name": CLEAR_INTERVAL})
        elif isinstance(handle, int) and not isinstance(handle, bool):
            if self._native_callbacks.pop(handle, None) is not None:
                self.killTimer(handle)

    def teardown(self):
        """Cancel every outstanding timer and release the background thread."""
        for handle in list(self._callbacks.keys()):
            self.cancel(handle)
        for handle in list(self._native_callbacks.keys()):
            self.cancel(handle)

        if self._context is not None:
            context, self._context = self._context, None
            try:
                context.message.disconnect(self._on_context_message)
            except (TypeError, RuntimeError):
                pass
            context.release()
            logger.debug("Interval worker released")

    @property
    def active_handles(self):
        return list(self._callbacks.keys()) + list(self._native_callbacks.keys())

    def _on_context_message(self, payload):
        if not isinstance(payload, dict) or payload.get("name") != RUN_CALLBACK:
            return
        callback = self._callbacks.get(payload.get("id"))
        if callback is not None:
            self._run(callback)

    def timerEvent(self, event: QTimerEvent):
        callback = self._native_callbacks.get(event.timerId())
        if callback is not None:
            self._run(callback)

    def _run(self, callback: Callable[[], None]):
        try:
            callback()
        except Exception as e:
            logger.error(f"Interval callback error: {e}")

"""Periodic callback bound to one call site."""
from typing import Callable, Optional
from core.worker_interval import WorkerInterval, Handle


class PeriodicCallback:
    """
    Keep at most one timer running a callback every interval_ms.

    The callback can be swapped at any time; ticks always run the latest one
    without the timer being recreated. Changing the interval (including to or
    from None) replaces the timer.
    """

    def __init__(self, scheduler: WorkerInterval, callback: Optional[Callable[[], None]] = None,
                 interval_ms: Optional[int] = None):
        self._scheduler = scheduler
        self._callback = callback
        self._interval_ms: Optional[int] = None
        self._handle: Optional[Handle] = None
        self.set_interval(interval_ms)

    @property
    def callback(self) -> Optional[Callable[[], None]]:
        return self._callback

    @callback.setter
    def callback(self, value: Optional[Callable[[], None]]):
        self._callback = value

    @property
    def interval_ms(self) -> Optional[int]:
        return self._interval_ms

    @property
    def handle(self) -> Optional[Handle]:
        return self._handle

    @property
    def is_active(self) -> bool:
        return self._handle is not None

    def set_interval(self, interval_ms: Optional[int]) -> Optional[Handle]:
        """Apply a new period; None disables the timer."""
        if interval_ms == self._interval_ms and (self._handle is not None or interval_ms is None):
            return self._handle

        self._cancel()
        self._interval_ms = interval_ms
        if interval_ms is not None:
            self._handle = self._scheduler.schedule(self._fire, interval_ms)
        return self._handle

    def close(self):
        """Stop the timer for good."""
        self._cancel()
        self._interval_ms = None

    def _cancel(self):
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _fire(self):
        callback = self._callback
        if callback is not None:
            callback()

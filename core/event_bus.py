"""Event Bus for inter-module communication using Qt signals/slots."""
from PyQt5.QtCore import QObject, pyqtSignal


class EventBus(QObject):
    """Central event bus for application-wide communication."""

    # Timer signals
    timer_ticked = pyqtSignal(str, int)  # phase, remaining seconds
    timer_started = pyqtSignal(str)  # phase
    timer_paused = pyqtSignal(str)  # phase
    timer_reset = pyqtSignal(str)  # phase
    phase_completed = pyqtSignal(str)  # finished phase
    phase_changed = pyqtSignal(str)  # new phase

    # Session signals
    work_logged = pyqtSignal(object)  # SessionRecord for a worked segment
    session_completed = pyqtSignal(object)  # SessionRecord for a full session

    # Notion signals
    notion_entry_created = pyqtSignal(str)  # page id
    quest_status_updated = pyqtSignal(str, str)  # page id, status
    sync_failed = pyqtSignal(str)  # reason

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            QObject.__init__(cls._instance)
        return cls._instance

    def __init__(self):
        # QObject is initialised once in __new__
        pass


# Global event bus instance
event_bus = EventBus()

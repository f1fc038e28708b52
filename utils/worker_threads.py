"""
Worker Threads for Non-Blocking Operations
Keeps Notion round trips off the timer thread
"""
from typing import Callable, Iterable, Optional
from PyQt5.QtCore import QThread, pyqtSignal
from data.models import SessionRecord
from notion.client import NotionService
from notion.entries import create_session_entry
from notion.quest_status import update_quest_status
from utils.logger import logger

ServiceFactory = Callable[[], NotionService]


class NotionEntryWorker(QThread):
    """Background worker saving a finished session to Notion."""

    # Signals
    entry_created = pyqtSignal(str)  # page id
    entry_failed = pyqtSignal(str)  # error message

    def __init__(self, service_factory: ServiceFactory, database_id: str,
                 record: SessionRecord, tags: Optional[Iterable[str]] = None):
        super().__init__()
        self.service_factory = service_factory
        self.database_id = database_id
        self.record = record
        self.tags = list(tags or [])

    def run(self):
        """Create the entry in background thread."""
        try:
            service = self.service_factory()
            page_id = create_session_entry(service, self.database_id, self.record, tags=self.tags)
            self.entry_created.emit(page_id)
        except Exception as e:
            logger.error(f"Notion entry worker error: {e}")
            self.entry_failed.emit(str(e))


class QuestStatusWorker(QThread):
    """Background worker propagating a quest status change."""

    # Signals
    status_updated = pyqtSignal(str, str)  # page id, status
    status_failed = pyqtSignal(str)  # error message

    def __init__(self, service_factory: ServiceFactory, status: str,
                 quest_page_id: Optional[str] = None,
                 adventure_page_id: Optional[str] = None,
                 tracker_database_id: Optional[str] = None):
        super().__init__()
        self.service_factory = service_factory
        self.status = status
        self.quest_page_id = quest_page_id
        self.adventure_page_id = adventure_page_id
        self.tracker_database_id = tracker_database_id

    def run(self):
        """Update statuses in background."""
        try:
            service = self.service_factory()
            updated = update_quest_status(
                service, self.status,
                quest_page_id=self.quest_page_id,
                adventure_page_id=self.adventure_page_id,
                tracker_database_id=self.tracker_database_id,
            )
            for page_id in updated:
                self.status_updated.emit(page_id, self.status)
        except Exception as e:
            logger.error(f"Quest status worker error: {e}")
            self.status_failed.emit(str(e))


class DatabaseListWorker(QThread):
    """Background worker fetching the databases shared with the user."""

    # Signals
    data_received = pyqtSignal(list)  # List of DatabaseOption
    error_occurred = pyqtSignal(str)  # Error message

    def __init__(self, service_factory: ServiceFactory):
        super().__init__()
        self.service_factory = service_factory

    def run(self):
        """Fetch databases in background."""
        try:
            options = self.service_factory().database_options()
            self.data_received.emit(options)
        except Exception as e:
            logger.error(f"Database list worker error: {e}")
            self.error_occurred.emit(str(e))

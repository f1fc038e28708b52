"""
Session Sync Manager
Books worked time into the local timesheet and mirrors sessions and quest
status to Notion.
"""
from typing import Callable, List, Optional
from PyQt5.QtCore import QObject, QThread
from core.event_bus import event_bus
from data.models import QuestStatus, SessionConfig, SessionRecord, TimerPhase, TimesheetEntry
from data.timesheet_store import TimesheetStore
from notion.client import NotionService
from utils.worker_threads import NotionEntryWorker, QuestStatusWorker
from utils.logger import logger


class SessionSyncManager(QObject):
    """Listens to timer events and persists them."""

    def __init__(self, session_config: SessionConfig,
                 timesheet_store: Optional[TimesheetStore],
                 service_factory: Callable[[], NotionService],
                 quest_sync: bool = False):
        super().__init__()
        self.session_config = session_config
        self.timesheet_store = timesheet_store
        self.service_factory = service_factory
        self.quest_sync = quest_sync
        self._workers: List[QThread] = []

        event_bus.work_logged.connect(self.on_work_logged)
        event_bus.session_completed.connect(self.on_session_completed)
        event_bus.timer_started.connect(self.on_timer_started)
        event_bus.timer_paused.connect(self.on_timer_paused)

    def close(self):
        """Detach from the event bus and wait for running workers."""
        for signal, slot in (
            (event_bus.work_logged, self.on_work_logged),
            (event_bus.session_completed, self.on_session_completed),
            (event_bus.timer_started, self.on_timer_started),
            (event_bus.timer_paused, self.on_timer_paused),
        ):
            try:
                signal.disconnect(slot)
            except TypeError:
                pass
        for worker in list(self._workers):
            worker.wait()
        self._workers.clear()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_work_logged(self, record: SessionRecord):
        """Store a worked segment in the timesheet."""
        if self.timesheet_store is None or not record.project_id:
            return
        entry = TimesheetEntry(
            user_id=self.session_config.user_id,
            project_id=record.project_id,
            database_id=record.database_id or self.session_config.status_database_id,
            timer_value=record.duration_seconds,
            start_time=record.start_time,
            end_time=record.end_time or record.start_time + record.duration_seconds,
        )
        try:
            self.timesheet_store.add(entry)
            logger.info(f"Timesheet added {record.project_title}: {record.duration_seconds}s")
        except Exception as e:
            logger.error(f"Timesheet upload error {record.project_title}: {e}")
            event_bus.sync_failed.emit(f"timesheet: {e}")

    def on_session_completed(self, record: SessionRecord):
        """Save a completed work session to the tracking database."""
        cfg = self.session_config
        if not cfg.is_ready_to_save:
            logger.debug("Session not saved to Notion: project or databases not selected")
            return

        worker = NotionEntryWorker(self.service_factory, cfg.tracking_database_id, record, cfg.tags)
        worker.entry_created.connect(event_bus.notion_entry_created.emit)
        worker.entry_failed.connect(lambda msg: event_bus.sync_failed.emit(f"notion entry: {msg}"))
        self._start(worker)

    def on_timer_started(self, phase: str):
        if phase == TimerPhase.SESSION.value:
            self.push_quest_status(QuestStatus.IN_PROGRESS)

    def on_timer_paused(self, phase: str):
        if phase == TimerPhase.SESSION.value:
            self.push_quest_status(QuestStatus.PAUSED)

    def push_quest_status(self, status: str, adventure_page_id: Optional[str] = None) -> bool:
        """Propagate a status to the selected project page and its tracker entries."""
        project = self.session_config.project
        if not self.quest_sync or project is None:
            return False

        worker = QuestStatusWorker(
            self.service_factory, status,
            quest_page_id=project.value,
            adventure_page_id=adventure_page_id,
            tracker_database_id=self.session_config.tracking_database_id or None,
        )
        worker.status_updated.connect(event_bus.quest_status_updated.emit)
        worker.status_failed.connect(lambda msg: event_bus.sync_failed.emit(f"quest status: {msg}"))
        self._start(worker)
        return True

    def _start(self, worker: QThread):
        self._workers.append(worker)
        worker.finished.connect(lambda: self._forget(worker))
        worker.start()

    def _forget(self, worker: QThread):
        if worker in self._workers:
            self._workers.remove(worker)

"""
Pomo Notion Tracker - Main Entry Point
Runs a Pomodoro timer whose sessions are booked to a local timesheet and
saved to Notion.
"""
import signal
import sys
from PyQt5.QtCore import QCoreApplication, QTimer

from utils.config_manager import config
from utils.logger import logger, Logger
from core.event_bus import event_bus
from core.worker_interval import WorkerInterval
from core.pomodoro_timer import PomodoroTimer
from core.session_sync import SessionSyncManager
from data.database import Database
from data.models import ProjectOption, SessionConfig
from data.notion_users_store import NotionUsersStore
from data.timesheet_store import TimesheetStore
from notion.client import NotionService


def build_session_config() -> SessionConfig:
    """Session selections from the sync section of the config."""
    project = None
    if config.get('sync.project_id'):
        project = ProjectOption(
            value=config.get('sync.project_id'),
            label=config.get('sync.project_title') or "Work",
        )
    return SessionConfig(
        project=project,
        tags=list(config.get('sync.tags', []) or []),
        status_database_id=config.get('sync.status_database_id', '') or '',
        tracking_database_id=config.get('sync.tracking_database_id', '') or '',
        user_id=config.get('sync.user_id', 'notion-user'),
    )


class PomoApp:
    """Wires the scheduler, timer and sync layer together."""

    def __init__(self):
        self.db = Database()
        self.notion_users = NotionUsersStore(self.db)
        self.session_config = build_session_config()

        self.scheduler = WorkerInterval()
        self.scheduler.initialize()
        mode = "background thread" if self.scheduler.uses_background else "host thread"
        logger.info(f"Interval scheduler running on {mode}")

        self.timer = PomodoroTimer(self.scheduler)
        self.timer.set_project(self.session_config.project, self.session_config.status_database_id)

        self.sync = SessionSyncManager(
            self.session_config,
            TimesheetStore(self.db),
            self._notion_service,
            quest_sync=bool(config.get('sync.quest_status', False)),
        )

        event_bus.phase_changed.connect(lambda phase: logger.info(f"Now: {phase}"))
        event_bus.notion_entry_created.connect(lambda page_id: logger.info(f"Notion entry created: {page_id}"))
        event_bus.sync_failed.connect(lambda reason: logger.warning(f"Sync failed: {reason}"))

    def _notion_service(self) -> NotionService:
        return NotionService.for_user([self.session_config.user_id], self.notion_users)

    def start(self):
        self.timer.start()

    def shutdown(self):
        logger.info("Shutting down")
        if self.timer.is_running:
            self.timer.pause()
        self.timer.close()
        self.sync.close()
        self.scheduler.teardown()
        self.db.close()


def main():
    app = QCoreApplication(sys.argv)

    # Load configuration FIRST
    try:
        config.load_config()
    except FileNotFoundError:
        logger.warning("Config file not found, using defaults")
        config.apply_env_overrides()
    Logger.configure(config.section('logging'))
    Logger.install_qt_handler()

    pomo = PomoApp()
    app.aboutToQuit.connect(pomo.shutdown)

    # Let Python see Ctrl+C while the Qt loop runs
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(250)

    pomo.start()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()

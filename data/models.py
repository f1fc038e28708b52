"""Data models for the Pomodoro tracker."""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional
from enum import Enum
import time


class TimerPhase(Enum):
    """Pomodoro phase enumeration."""
    SESSION = "Session"
    BREAK = "Break"
    LONG_BREAK = "Long Break"

    @property
    def is_work(self) -> bool:
        return self is TimerPhase.SESSION


class SessionType(Enum):
    """Kind of time recorded for a session."""
    WORK = "work"
    BREAK = "break"


class QuestStatus:
    """Status names written to Quest/Adventure/Tracker pages."""
    IN_PROGRESS = "In Progress"
    PAUSED = "Paused"
    COMPLETED = "Completed"


@dataclass
class ScheduledTimer:
    """A periodic timer owned by one scheduler."""
    id: str
    interval_ms: int


@dataclass
class ProjectOption:
    """A Notion page that time is tracked against."""
    value: str  # page id
    label: str  # page title


@dataclass
class DatabaseOption:
    """A Notion database available to the user."""
    id: str
    title: str
    icon: Optional[str] = None


@dataclass
class SessionRecord:
    """One segment of tracked time."""
    project_id: str
    project_title: str
    start_time: int  # epoch seconds
    duration_seconds: int
    end_time: Optional[int] = None  # epoch seconds
    database_id: str = ""
    session_type: SessionType = SessionType.WORK

    @property
    def duration_minutes(self) -> int:
        return int(round(self.duration_seconds / 60.0))

    @property
    def start_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.start_time)

    @property
    def end_datetime(self) -> datetime:
        if self.end_time is None:
            return datetime.now()
        return datetime.fromtimestamp(self.end_time)


@dataclass
class SessionConfig:
    """Selections that decide where a finished session is stored."""
    project: Optional[ProjectOption] = None
    tags: List[str] = field(default_factory=list)
    status_database_id: str = ""  # source database of the project
    tracking_database_id: str = ""  # time tracker database receiving entries
    user_id: str = "notion-user"

    @property
    def is_ready_to_save(self) -> bool:
        """Project, status database and tracking database are all chosen."""
        return bool(self.project and self.status_database_id and self.tracking_database_id)


@dataclass
class TimesheetEntry:
    """Locally stored timesheet row."""
    user_id: str
    project_id: str
    database_id: str
    timer_value: int  # seconds
    start_time: int
    end_time: int
    id: Optional[int] = None


@dataclass
class UserRecord:
    """Locally registered user."""
    email: str
    password_hash: str
    salt: str
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))


@dataclass
class NotionUser:
    """Notion connection stored for a user."""
    email: str
    access_token: str
    workspace: Optional[Dict[str, Any]] = None


@dataclass
class EmbedSettings:
    """Appearance and binding of an embeddable timer widget."""
    page_id: str = ""
    theme: str = "light"
    widget_bg: str = "#ffffff"
    widget_color: str = "#111827"
    input_width: int = 320
    input_border: str = "#d1d5db"
    timer_color: str = "#111827"
    timer_font_size: int = 48
    task_database_id: str = ""
    session_database_id: str = ""
    task_id: str = ""
    task_title: str = ""
    user_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SavedEmbed:
    """An embed link saved by a user."""
    id: str  # page id or "default"
    title: str
    link: str
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))
    config: Optional[Dict[str, Any]] = None

"""
Shared pytest configuration and fixtures.

Provides:
- A QCoreApplication for the whole session and an event-loop wait helper
- Config reset between tests
- A temporary SQLite database
- Notion page/database payload factories and a mocked NotionService
"""

import os
import sys
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PyQt5.QtCore import QCoreApplication, QEventLoop, QTimer  # noqa: E402

from utils.config_manager import config  # noqa: E402


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "timing: Tests that run a real Qt event loop")


# =============================================================================
# Qt
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One Qt application for every test."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def wait_ms(ms: int):
    """Spin the Qt event loop for ms milliseconds."""
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec_()


@pytest.fixture
def wait():
    return wait_ms


# =============================================================================
# Config
# =============================================================================

@pytest.fixture(autouse=True)
def clean_config():
    """Start every test from an empty configuration."""
    config.reset()
    config.set('notion.retry_base_delay', 0.0)
    yield config
    config.reset()


# =============================================================================
# Storage
# =============================================================================

@pytest.fixture
def db(tmp_path):
    from data.database import Database
    database = Database(str(tmp_path / "test.db"))
    yield database
    database.close()


# =============================================================================
# Notion payload factories
# =============================================================================

def make_prop(prop_type: str, **extra) -> Dict:
    prop = {"type": prop_type}
    prop.update(extra)
    return prop


def make_page(page_id: str, properties: Dict, title: Optional[str] = None) -> Dict:
    props = dict(properties)
    if title is not None:
        props.setdefault("Name", {"type": "title", "title": [{"plain_text": title}]})
    return {"object": "page", "id": page_id, "properties": props}


def relation(*ids: str) -> Dict:
    return {"type": "relation", "relation": [{"id": i} for i in ids]}


@pytest.fixture
def tracker_schema() -> Dict:
    """A typical Time Tracker database schema."""
    return {
        "Name": make_prop("title"),
        "Status": make_prop("status"),
        "Start Time": make_prop("date"),
        "End Time": make_prop("date"),
        "Duration": make_prop("number"),
        "Quest": make_prop("relation"),
        "Notes": make_prop("rich_text"),
        "Tags": make_prop("multi_select"),
    }


@pytest.fixture
def notion_service():
    """A NotionService double backed by in-memory pages."""
    service = MagicMock()
    service.pages = {}
    service.databases = {}
    service.query_results = []

    service.retrieve_page.side_effect = lambda page_id: service.pages[page_id]
    service.retrieve_database.side_effect = lambda db_id: service.databases[db_id]
    service.query_database.side_effect = lambda db_id, filter=None: list(service.query_results)
    service.create_page.return_value = {"id": "new-page"}
    service.update_page.return_value = {}
    return service

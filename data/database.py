"""SQLite storage shared by the local stores."""
import sqlite3
import threading
from typing import Optional
from utils.config_manager import config
from utils.logger import logger

SCHEMA = (
    "CREATE TABLE IF NOT EXISTS users ("
    " email TEXT PRIMARY KEY, password_hash TEXT NOT NULL, salt TEXT NOT NULL,"
    " created_at INTEGER NOT NULL)",
    "CREATE TABLE IF NOT EXISTS notion_users ("
    " email TEXT PRIMARY KEY, access_token TEXT, workspace TEXT,"
    " created_at INTEGER NOT NULL, updated_at INTEGER)",
    "CREATE TABLE IF NOT EXISTS embeds ("
    " email TEXT NOT NULL, id TEXT NOT NULL, title TEXT NOT NULL, link TEXT NOT NULL,"
    " created_at INTEGER NOT NULL, config TEXT, PRIMARY KEY(email, link))",
    "CREATE TABLE IF NOT EXISTS timesheets ("
    " id INTEGER PRIMARY KEY AUTOINCREMENT, user_id TEXT NOT NULL, project_id TEXT NOT NULL,"
    " database_id TEXT NOT NULL, timer_value INTEGER NOT NULL,"
    " start_time INTEGER NOT NULL, end_time INTEGER NOT NULL)",
)


class Database:
    """One SQLite connection guarded by a lock."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.get('storage.path', '.data.db')
        # Workers write from their own threads
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self.lock = threading.Lock()
        with self.lock:
            for statement in SCHEMA:
                self._conn.execute(statement)
            self._conn.commit()
        logger.debug(f"Opened database {self.path}")

    def execute(self, sql: str, params=()) -> sqlite3.Cursor:
        """Run a write statement and commit."""
        with self.lock:
            cursor = self._conn.execute(sql, params)
            self._conn.commit()
            return cursor

    def fetchall(self, sql: str, params=()):
        with self.lock:
            return self._conn.execute(sql, params).fetchall()

    def fetchone(self, sql: str, params=()):
        with self.lock:
            return self._conn.execute(sql, params).fetchone()

    def close(self):
        with self.lock:
            self._conn.close()

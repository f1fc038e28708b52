"""Notion connections (OAuth access tokens) per user."""
import json
import time
from typing import Any, Dict, Optional
from data.database import Database
from data.models import NotionUser
from utils.logger import logger


class NotionUsersStore:
    """Key-value store of Notion tokens keyed by user email/id."""

    def __init__(self, db: Database):
        self.db = db

    def upsert(self, email: str, access_token: str, workspace: Optional[Dict[str, Any]] = None):
        now = int(time.time() * 1000)
        self.db.execute(
            "INSERT INTO notion_users (email, access_token, workspace, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?) ON CONFLICT(email) DO UPDATE SET "
            "access_token=excluded.access_token, workspace=excluded.workspace, "
            "updated_at=excluded.updated_at",
            (email, access_token, json.dumps(workspace) if workspace else None, now, now),
        )
        logger.info(f"Stored Notion connection for {email}")

    def fetch(self, email: str) -> Optional[NotionUser]:
        """Connection for a user, or None when missing or disconnected."""
        row = self.db.fetchone(
            "SELECT email, access_token, workspace FROM notion_users WHERE email = ?", (email,)
        )
        if row is None or not row["access_token"]:
            return None
        workspace = json.loads(row["workspace"]) if row["workspace"] else None
        return NotionUser(email=row["email"], access_token=str(row["access_token"]), workspace=workspace)

    def disconnect(self, email: str):
        self.db.execute(
            "UPDATE notion_users SET access_token = NULL, workspace = NULL, updated_at = ? WHERE email = ?",
            (int(time.time() * 1000), email),
        )
        logger.info(f"Disconnected Notion for {email}")

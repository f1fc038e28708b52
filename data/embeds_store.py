"""Saved embed links per user."""
import json
from typing import List
from data.database import Database
from data.models import SavedEmbed


class EmbedsStore:
    """Embed links a user saved, newest first."""

    def __init__(self, db: Database):
        self.db = db

    def list_for(self, email: str) -> List[SavedEmbed]:
        rows = self.db.fetchall(
            "SELECT id, title, link, created_at, config FROM embeds WHERE email = ? "
            "ORDER BY created_at DESC",
            (email,),
        )
        return [
            SavedEmbed(
                id=row["id"], title=row["title"], link=row["link"],
                created_at=int(row["created_at"]),
                config=json.loads(row["config"]) if row["config"] else None,
            )
            for row in rows
        ]

    def add(self, email: str, embed: SavedEmbed) -> List[SavedEmbed]:
        """Save an embed; a link already saved by the user is kept as is."""
        self.db.execute(
            "INSERT OR IGNORE INTO embeds (email, id, title, link, created_at, config) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (email, embed.id, embed.title, embed.link, embed.created_at,
             json.dumps(embed.config) if embed.config else None),
        )
        return self.list_for(email)

    def delete(self, email: str, link: str) -> List[SavedEmbed]:
        self.db.execute("DELETE FROM embeds WHERE email = ? AND link = ?", (email, link))
        return self.list_for(email)

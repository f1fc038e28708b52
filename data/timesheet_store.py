"""Local timesheet of worked Pomodoro time."""
from typing import List, Optional
import pandas as pd
from data.database import Database
from data.models import TimesheetEntry


class TimesheetStore:
    """Timesheet rows per user and project."""

    def __init__(self, db: Database):
        self.db = db

    def add(self, entry: TimesheetEntry) -> int:
        cursor = self.db.execute(
            "INSERT INTO timesheets (user_id, project_id, database_id, timer_value, start_time, end_time) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (entry.user_id, entry.project_id, entry.database_id, int(entry.timer_value),
             int(entry.start_time), int(entry.end_time)),
        )
        entry.id = cursor.lastrowid
        return entry.id

    def list_between(self, user_id: str, start_date: int, end_date: int,
                     project_id: Optional[str] = None) -> List[TimesheetEntry]:
        """
        Entries that started within [start_date, end_date] (epoch seconds).
        """
        sql = ("SELECT * FROM timesheets WHERE user_id = ? AND start_time >= ? AND start_time <= ?")
        params = [user_id, int(start_date), int(end_date)]
        if project_id:
            sql += " AND project_id = ?"
            params.append(project_id)
        sql += " ORDER BY start_time"
        return [
            TimesheetEntry(
                id=row["id"], user_id=row["user_id"], project_id=row["project_id"],
                database_id=row["database_id"], timer_value=row["timer_value"],
                start_time=row["start_time"], end_time=row["end_time"],
            )
            for row in self.db.fetchall(sql, params)
        ]

    def delete(self, user_id: str, timesheet_id: int) -> bool:
        cursor = self.db.execute(
            "DELETE FROM timesheets WHERE id = ? AND user_id = ?", (timesheet_id, user_id)
        )
        return cursor.rowcount > 0

    def summary_by_project(self, user_id: str, start_date: int, end_date: int) -> pd.DataFrame:
        """Sessions and worked minutes per project, most worked first."""
        entries = self.list_between(user_id, start_date, end_date)
        if not entries:
            return pd.DataFrame(columns=["project_id", "sessions", "minutes"])

        df = pd.DataFrame([
            {"project_id": e.project_id, "timer_value": e.timer_value} for e in entries
        ])
        summary = df.groupby("project_id").agg(
            sessions=("timer_value", "size"),
            seconds=("timer_value", "sum"),
        ).reset_index()
        summary["minutes"] = (summary["seconds"] / 60.0).round(1)
        return summary.drop(columns=["seconds"]).sort_values("minutes", ascending=False).reset_index(drop=True)

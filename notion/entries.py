"""Pomodoro session entries in a Notion time tracker database."""
from datetime import timezone
from typing import Dict, Iterable, Optional
from data.models import QuestStatus, SessionRecord
from notion.client import NotionService
from notion.exceptions import NotionError, PropertyNotFoundError
from notion import properties as p
from utils.logger import logger


def build_session_properties(db_props: Dict, record: SessionRecord,
                             status: Optional[str] = None,
                             tags: Optional[Iterable[str]] = None,
                             notes: Optional[str] = None) -> Dict:
    """
    Map a session onto whatever columns the tracker database has.

    Args:
        db_props: Properties of the target database schema
        record: Session to store
        status: Status name, defaults to Completed
        tags: Tag names for a multi-select Tags column
        notes: Text for the Notes column; a generated summary when empty

    Returns:
        Notion properties payload for pages.create
    """
    minutes = record.duration_minutes
    start = record.start_datetime.astimezone(timezone.utc)
    end = record.end_datetime.astimezone(timezone.utc)
    has_end = record.end_time is not None

    props: Dict = {
        p.find_title_property(db_props): p.title_value(f"{record.project_title} Session"),
    }

    status_name = p.find_status_property(db_props)
    if status_name:
        prop_type = db_props[status_name].get("type")
        if prop_type in p.STATUS_TYPES:
            props[status_name] = p.status_value(prop_type, status or QuestStatus.COMPLETED)

    start_name = p.find_start_property(db_props)
    if start_name:
        props[start_name] = p.date_value(start)

    end_name = p.find_end_property(db_props, include_due=True)
    if end_name and has_end:
        props[end_name] = p.date_value(end)

    duration_name = p.find_duration_property(db_props)
    if duration_name and has_end:
        prop_type = db_props[duration_name].get("type")
        if prop_type == "number":
            props[duration_name] = {"number": minutes}
        elif prop_type == "rich_text":
            props[duration_name] = p.rich_text_value(f"{minutes} min")

    quest_relation = p.find_relation_property(db_props, "Quest", "Quests")
    if quest_relation and record.project_id:
        props[quest_relation] = p.relation_value([record.project_id])

    quests_text = p.find_rich_text_property(db_props, ("Quests", "Quest"))
    if quests_text:
        props[quests_text] = p.rich_text_value(record.project_title)

    notes_name = p.find_rich_text_property(db_props, ("Notes",))
    if notes_name:
        summary = notes or (
            f"Session: {minutes} min | "
            f"Start: {record.start_datetime:%Y-%m-%d %H:%M:%S} | "
            f"End: {record.end_datetime:%Y-%m-%d %H:%M:%S}"
        )
        props[notes_name] = p.rich_text_value(summary)

    tag_names = [t for t in (tags or []) if t]
    if tag_names and (db_props.get("Tags") or {}).get("type") == "multi_select":
        props["Tags"] = p.multi_select_value(tag_names)

    return props


def create_session_entry(service: NotionService, database_id: str, record: SessionRecord,
                         status: Optional[str] = None,
                         tags: Optional[Iterable[str]] = None,
                         notes: Optional[str] = None) -> str:
    """Create a page for the session and return its id."""
    try:
        database = service.retrieve_database(database_id)
        db_props = database.get("properties") or {}
        if not db_props:
            raise PropertyNotFoundError(f"Database {database_id} has no properties to write")
        props = build_session_properties(db_props, record, status, tags, notes)
        page = service.create_page(database_id, props)
    except NotionError as e:
        logger.error(f"Error creating Notion entry: {e}")
        raise

    logger.info(f"Saved {record.duration_minutes} min session for {record.project_title} to Notion")
    return page.get("id", "")

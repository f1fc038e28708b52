"""
Quest Status Sync
Propagates status changes between linked Quest, Adventure and time Tracker
pages.
"""
from typing import Dict, List, Optional, Tuple
from data.models import QuestStatus
from notion.client import NotionService
from notion.exceptions import NotionError
from notion import properties as p
from utils.logger import logger


def _status_update(props: Dict, status: str, prefer_named: bool = False) -> Dict:
    """Properties update setting status plus the matching start/end date."""
    update: Dict = {}
    status_name = p.find_status_property(props, prefer_named=prefer_named)
    if status_name:
        update[status_name] = p.status_value(props[status_name].get("type"), status)

    lowered = status.lower()
    if lowered == QuestStatus.COMPLETED.lower():
        end_name = p.find_end_property(props)
        if end_name:
            update[end_name] = p.date_value()
    elif lowered == QuestStatus.IN_PROGRESS.lower():
        start_name = p.find_start_property(props)
        if start_name:
            update[start_name] = p.date_value()
    return update


def update_page_status(service: NotionService, page_id: str, status: str,
                       page: Optional[Dict] = None) -> bool:
    """
    Set the status of one page.

    Returns:
        True if the page had anything to update
    """
    page = page or service.retrieve_page(page_id)
    update = _status_update(page.get("properties") or {}, status)
    if not update:
        return False
    service.update_page(page_id, update)
    return True


def _sync_related_quests(service: NotionService, quest_ids: List[str], status: str):
    for quest_id in quest_ids:
        try:
            update_page_status(service, quest_id, status)
        except NotionError as e:
            logger.warning(f"Failed to update quest status for {quest_id}: {e}")


def update_quest_status(service: NotionService, status: str,
                        quest_page_id: Optional[str] = None,
                        adventure_page_id: Optional[str] = None,
                        tracker_database_id: Optional[str] = None) -> List[str]:
    """
    Apply a status to a quest and/or adventure and everything linked to them.

    Args:
        service: Notion service
        status: e.g. "In Progress", "Paused", "Completed"
        quest_page_id: Quest page
        adventure_page_id: Adventure page whose related quests follow along
        tracker_database_id: Time tracker database whose entries for the quest follow along

    Returns:
        Ids of the pages that were updated directly
    """
    if not status or not (quest_page_id or adventure_page_id):
        raise ValueError("status and quest_page_id or adventure_page_id are required")

    updated = []
    if quest_page_id and update_page_status(service, quest_page_id, status):
        updated.append(quest_page_id)

    if adventure_page_id:
        adventure = service.retrieve_page(adventure_page_id)
        if adventure_page_id != quest_page_id and update_page_status(
                service, adventure_page_id, status, page=adventure):
            updated.append(adventure_page_id)
        try:
            adv_props = adventure.get("properties") or {}
            relation = p.find_relation_property(adv_props, "Quests", "Quest")
            if relation:
                _sync_related_quests(service, p.relation_ids(adv_props, relation), status)
        except NotionError as e:
            logger.warning(f"Failed to propagate status to adventure's quests: {e}")

    if tracker_database_id and quest_page_id:
        try:
            update_tracker_entries(service, tracker_database_id, quest_page_id, status)
        except NotionError as e:
            logger.warning(f"Failed to update linked tracker entries: {e}")

    return updated


def update_tracker_entries(service: NotionService, database_id: str, quest_page_id: str,
                           status: str) -> int:
    """Update tracker entries related to a quest; returns how many changed."""
    db_props = service.retrieve_database(database_id).get("properties") or {}
    relation = p.find_relation_property(db_props, "Quest", "Quests")
    if not relation:
        return 0

    status_name = p.find_status_property(db_props)
    conditions = [{"property": relation, "relation": {"contains": quest_page_id}}]
    # Pausing or completing only touches entries still running
    if status_name and status.lower() in (QuestStatus.PAUSED.lower(), QuestStatus.COMPLETED.lower()):
        key = "status" if db_props[status_name].get("type") == "status" else "select"
        conditions.append({"property": status_name, key: {"equals": QuestStatus.IN_PROGRESS}})

    changed = 0
    for page in service.query_database(database_id, filter={"and": conditions}):
        props = page.get("properties") or {}
        update = _status_update(props, status, prefer_named=True)
        if update:
            service.update_page(page["id"], update)
            changed += 1
    return changed


def _link(service: NotionService, page_id: str, props: Dict, relation: str, target_id: str):
    """Add target_id to a relation, keeping existing links."""
    ids = p.relation_ids(props, relation)
    if target_id not in ids:
        ids.append(target_id)
    service.update_page(page_id, {relation: p.relation_value(ids)})
    return ids


def start_quest(service: NotionService, quest_page_id: str,
                adventure_page_id: Optional[str] = None,
                tracker_database_id: Optional[str] = None,
                project_title: Optional[str] = None) -> Optional[str]:
    """
    Mark a quest as started and wire it to its adventure and tracker.

    Returns:
        Id of the tracker entry created, if any
    """
    quest = service.retrieve_page(quest_page_id)
    quest_props = quest.get("properties") or {}
    if not update_page_status(service, quest_page_id, QuestStatus.IN_PROGRESS, page=quest):
        logger.info(f"No updatable status/date properties on quest {quest_page_id}")
        return None

    if adventure_page_id:
        adventure = service.retrieve_page(adventure_page_id)
        adv_props = adventure.get("properties") or {}
        adv_status = p.find_status_property(adv_props, prefer_named=False)
        if adv_status:
            service.update_page(adventure_page_id, {
                adv_status: p.status_value(adv_props[adv_status].get("type"), QuestStatus.IN_PROGRESS)
            })

        quests_relation = p.find_relation_property(adv_props, "Quests", "Quest")
        if quests_relation:
            quest_ids = _link(service, adventure_page_id, adv_props, quests_relation, quest_page_id)
            _sync_related_quests(service, quest_ids, QuestStatus.IN_PROGRESS)

        adventure_relation = p.find_relation_property(quest_props, "Adventure", "Adventures")
        if adventure_relation:
            _link(service, quest_page_id, quest_props, adventure_relation, adventure_page_id)

    if not tracker_database_id:
        return None

    db_props = service.retrieve_database(tracker_database_id).get("properties") or {}
    entry = {
        p.find_title_property(db_props): p.title_value(f"{project_title or 'Work'} Session"),
    }
    status_name = p.find_status_property(db_props)
    if status_name:
        entry[status_name] = p.status_value(db_props[status_name].get("type"), QuestStatus.IN_PROGRESS)
    start_name = p.find_start_property(db_props)
    if start_name:
        entry[start_name] = p.date_value()
    relation = p.find_relation_property(db_props, "Quest", "Quests")
    if relation:
        entry[relation] = p.relation_value([quest_page_id])

    created = service.create_page(tracker_database_id, entry)
    return created.get("id")


def list_completed_quests(service: NotionService, database_id: str,
                          adventure_page_id: Optional[str] = None) -> List[Tuple[str, str]]:
    """(id, title) of the Completed quests, optionally within one adventure."""
    db_props = service.retrieve_database(database_id).get("properties") or {}

    filters = []
    status_type = (db_props.get("Status") or {}).get("type")
    if status_type in p.STATUS_TYPES:
        filters.append({"property": "Status", status_type: {"equals": QuestStatus.COMPLETED}})
    if adventure_page_id and (db_props.get("Adventure") or {}).get("type") == "relation":
        filters.append({"property": "Adventure", "relation": {"contains": adventure_page_id}})

    if len(filters) > 1:
        query_filter = {"and": filters}
    else:
        query_filter = filters[0] if filters else None

    return [
        (page["id"], p.get_page_title(page, default=page["id"]))
        for page in service.query_database(database_id, filter=query_filter)
    ]

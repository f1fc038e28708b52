"""
Property Discovery
Finds status/date/duration/relation columns by name across differently
shaped Notion databases, and builds property values for them.
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

START_NAMES = ("Start Time", "Start Date")
START_KEYWORDS = ("start", "begin", "started")
END_NAMES = ("End Time", "End Date")
END_KEYWORDS = ("end", "finish")
DURATION_NAMES = ("Duration", "Duration (minutes)", "Time Worked")
DURATION_KEYWORDS = ("duration", "time")
STATUS_TYPES = ("status", "select")

Properties = Dict[str, Dict]


def _type_of(props: Properties, name: str) -> Optional[str]:
    prop = props.get(name)
    return prop.get("type") if isinstance(prop, dict) else None


def find_by_type(props: Properties, types: Iterable[str]) -> Optional[str]:
    """First property whose type is one of types."""
    types = tuple(types)
    for name, prop in props.items():
        if isinstance(prop, dict) and prop.get("type") in types:
            return name
    return None


def find_property(props: Properties, preferred: Sequence[str], keywords: Sequence[str],
                  types: Sequence[str], preferred_any_type: bool = False) -> Optional[str]:
    """
    Resolve a property by exact names first, then by keyword.

    Args:
        props: Notion properties dict
        preferred: Names tried in order
        keywords: Lower-case fragments matched against names
        types: Accepted property types
        preferred_any_type: Accept a preferred name whatever its type

    Returns:
        The property name, or None
    """
    for name in preferred:
        prop_type = _type_of(props, name)
        if prop_type and (preferred_any_type or prop_type in types):
            return name
    for name, prop in props.items():
        if not isinstance(prop, dict) or prop.get("type") not in types:
            continue
        lowered = name.lower()
        if any(keyword in lowered for keyword in keywords):
            return name
    return None


def find_title_property(props: Properties, default: str = "Name") -> str:
    return find_by_type(props, ("title",)) or default


def find_status_property(props: Properties, prefer_named: bool = True) -> Optional[str]:
    """A "Status" column when present, otherwise the first status/select."""
    if prefer_named and _type_of(props, "Status"):
        return "Status"
    return find_by_type(props, STATUS_TYPES)


def find_start_property(props: Properties) -> Optional[str]:
    return find_property(props, START_NAMES + ("Started At",), START_KEYWORDS, ("date",))


def find_end_property(props: Properties, include_due: bool = False) -> Optional[str]:
    names = END_NAMES + (("Due Date",) if include_due else ())
    keywords = END_KEYWORDS + (("due",) if include_due else ())
    return find_property(props, names, keywords, ("date",))


def find_duration_property(props: Properties) -> Optional[str]:
    return find_property(props, DURATION_NAMES, DURATION_KEYWORDS, ("number", "rich_text"),
                         preferred_any_type=True)


def find_relation_property(props: Properties, singular: str, plural: str) -> Optional[str]:
    """Relation column named like singular/plural, e.g. Quest/Quests."""
    return find_property(props, (singular, plural), (singular.lower(),), ("relation",))


def find_rich_text_property(props: Properties, names: Sequence[str]) -> Optional[str]:
    for name in names:
        if _type_of(props, name) == "rich_text":
            return name
    return None


# ----------------------------------------------------------------------
# Values
# ----------------------------------------------------------------------

def status_value(prop_type: str, name: str) -> Dict:
    if prop_type == "status":
        return {"status": {"name": name}}
    return {"select": {"name": name}}


def date_value(when: Optional[datetime] = None) -> Dict:
    when = when or datetime.now(timezone.utc)
    return {"date": {"start": when.isoformat()}}


def title_value(text: str) -> Dict:
    return {"title": [{"text": {"content": text}}]}


def rich_text_value(text: str) -> Dict:
    return {"rich_text": [{"text": {"content": text}}]}


def relation_value(page_ids: Iterable[str]) -> Dict:
    return {"relation": [{"id": page_id} for page_id in page_ids]}


def multi_select_value(names: Iterable[str]) -> Dict:
    return {"multi_select": [{"name": name} for name in names]}


def relation_ids(props: Properties, name: str) -> List[str]:
    """Page ids held by a relation property."""
    relations = (props.get(name) or {}).get("relation") or []
    return [r.get("id") for r in relations if isinstance(r, dict) and r.get("id")]


def _plain_text(items) -> str:
    if not isinstance(items, list):
        return ""
    return "".join(
        (item or {}).get("plain_text") or ((item or {}).get("text") or {}).get("content") or ""
        for item in items
    ).strip()


def get_page_title(page: Optional[Dict], default: str = "Empty") -> str:
    """Title of a page, trying the Name column before any other title."""
    props = (page or {}).get("properties")
    if not props:
        return default
    text = _plain_text((props.get("Name") or {}).get("title"))
    if text:
        return text
    title_name = find_by_type(props, ("title",))
    if title_name:
        text = _plain_text(props[title_name].get("title"))
        if text:
            return text
    return default

"""Tests for Quest/Adventure/Tracker status propagation."""
import pytest

from notion.exceptions import NotionRequestError
from notion.quest_status import (
    list_completed_quests, start_quest, update_page_status, update_quest_status,
)
from conftest import make_prop, make_page, relation


def quest_page(page_id, status_type="status", **extra):
    props = {"State": make_prop(status_type), "End Date": make_prop("date"),
             "Start Date": make_prop("date")}
    props.update(extra)
    return make_page(page_id, props, title=page_id)


def updates_for(service, page_id):
    return [c.args[1] for c in service.update_page.call_args_list if c.args[0] == page_id]


def test_update_page_status_sets_end_on_completed(notion_service):
    notion_service.pages["q1"] = quest_page("q1")

    assert update_page_status(notion_service, "q1", "Completed")

    update = updates_for(notion_service, "q1")[0]
    assert update["State"] == {"status": {"name": "Completed"}}
    assert "End Date" in update


def test_update_page_status_paused_touches_status_only(notion_service):
    notion_service.pages["q1"] = quest_page("q1", status_type="select")

    update_page_status(notion_service, "q1", "Paused")

    assert updates_for(notion_service, "q1")[0] == {"State": {"select": {"name": "Paused"}}}


def test_page_without_status_columns_is_left_alone(notion_service):
    notion_service.pages["q1"] = make_page("q1", {}, title="bare")

    assert update_page_status(notion_service, "q1", "Paused") is False
    notion_service.update_page.assert_not_called()


def test_requires_status_and_page():
    with pytest.raises(ValueError):
        update_quest_status(None, "Paused")
    with pytest.raises(ValueError):
        update_quest_status(None, "", quest_page_id="q1")


def test_adventure_propagates_to_related_quests(notion_service):
    notion_service.pages["adv"] = quest_page("adv", Quests=relation("q1", "q2", "q3"))
    notion_service.pages["q1"] = quest_page("q1")
    notion_service.pages["q3"] = quest_page("q3")
    # q2 is missing: its failure must not stop q3
    original = notion_service.retrieve_page.side_effect

    def retrieve(page_id):
        if page_id == "q2":
            raise NotionRequestError("gone", 404)
        return original(page_id)

    notion_service.retrieve_page.side_effect = retrieve

    updated = update_quest_status(notion_service, "Paused", adventure_page_id="adv")

    assert updated == ["adv"]
    assert updates_for(notion_service, "q1")
    assert updates_for(notion_service, "q3")


def test_tracker_entries_narrowed_to_running(notion_service, tracker_schema):
    notion_service.pages["q1"] = quest_page("q1")
    notion_service.databases["tracker"] = {"properties": tracker_schema}
    notion_service.query_results = [
        make_page("entry-1", {"Status": make_prop("status"), "End Time": make_prop("date")}),
    ]

    update_quest_status(notion_service, "Completed", quest_page_id="q1",
                        tracker_database_id="tracker")

    _, kwargs = notion_service.query_database.call_args
    conditions = kwargs["filter"]["and"]
    assert {"property": "Quest", "relation": {"contains": "q1"}} in conditions
    assert {"property": "Status", "status": {"equals": "In Progress"}} in conditions
    entry_update = updates_for(notion_service, "entry-1")[0]
    assert entry_update["Status"] == {"status": {"name": "Completed"}}
    assert "End Time" in entry_update


def test_tracker_entries_resume_sets_start(notion_service, tracker_schema):
    notion_service.pages["q1"] = quest_page("q1")
    notion_service.databases["tracker"] = {"properties": tracker_schema}
    notion_service.query_results = [
        make_page("entry-1", {"Status": make_prop("status"), "Start Time": make_prop("date")}),
    ]

    update_quest_status(notion_service, "In Progress", quest_page_id="q1",
                        tracker_database_id="tracker")

    _, kwargs = notion_service.query_database.call_args
    assert len(kwargs["filter"]["and"]) == 1
    assert "Start Time" in updates_for(notion_service, "entry-1")[0]


def test_start_quest_links_adventure_and_creates_tracker_entry(notion_service, tracker_schema):
    notion_service.pages["q1"] = quest_page("q1", Adventure=relation())
    notion_service.pages["q0"] = quest_page("q0")
    notion_service.pages["adv"] = quest_page("adv", Quests=relation("q0"))
    notion_service.databases["tracker"] = {"properties": tracker_schema}
    notion_service.create_page.return_value = {"id": "entry-new"}

    entry_id = start_quest(notion_service, "q1", adventure_page_id="adv",
                           tracker_database_id="tracker", project_title="Docs")

    assert entry_id == "entry-new"
    assert {"Quests": {"relation": [{"id": "q0"}, {"id": "q1"}]}} in updates_for(notion_service, "adv")
    assert {"Adventure": {"relation": [{"id": "adv"}]}} in updates_for(notion_service, "q1")
    assert updates_for(notion_service, "q0")[0]["State"] == {"status": {"name": "In Progress"}}

    database_id, entry = notion_service.create_page.call_args[0]
    assert database_id == "tracker"
    assert entry["Name"]["title"][0]["text"]["content"] == "Docs Session"
    assert entry["Status"] == {"status": {"name": "In Progress"}}
    assert entry["Quest"] == {"relation": [{"id": "q1"}]}


def test_list_completed_quests(notion_service):
    notion_service.databases["quests"] = {"properties": {
        "Name": make_prop("title"),
        "Status": make_prop("select"),
        "Adventure": make_prop("relation"),
    }}
    notion_service.query_results = [make_page("q1", {}, title="Slay dragon"), make_page("q2", {})]

    items = list_completed_quests(notion_service, "quests", adventure_page_id="adv")

    assert items == [("q1", "Slay dragon"), ("q2", "q2")]
    _, kwargs = notion_service.query_database.call_args
    assert kwargs["filter"] == {"and": [
        {"property": "Status", "select": {"equals": "Completed"}},
        {"property": "Adventure", "relation": {"contains": "adv"}},
    ]}

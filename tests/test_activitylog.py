import json

import pytest

from trportfolio.constants import RESPONSE_ACTION_TYPE_TIMELINE_DETAIL
from trportfolio.timeline.activitylog import (
    ActivityLogAction,
    ActivityLogClient,
    ActivityLogItem,
    parse_activity_log_item,
)

RAW_ITEM = {
    "action": {"payload": "entry-id", "type": RESPONSE_ACTION_TYPE_TIMELINE_DETAIL},
    "eventType": "DOCUMENTS_CREATED",
    "icon": "logos/timeline_document/v2",
    "id": "entry-id",
    "subtitle": "subtitle",
    "timestamp": "2024-01-01T10:00:00.000+0000",
    "title": "title",
}


class FakeReader:
    def __init__(self, *pages):
        self.pages = [json.dumps(page).encode() for page in pages]
        self.calls = []

    def read(self, data_type, request):
        self.calls.append((data_type, request))
        return self.pages.pop(0)


def test_parse_item():
    item = parse_activity_log_item(RAW_ITEM)

    assert item == ActivityLogItem(
        action=ActivityLogAction("entry-id", RESPONSE_ACTION_TYPE_TIMELINE_DETAIL),
        event_type=RAW_ITEM["eventType"],
        icon=RAW_ITEM["icon"],
        id=RAW_ITEM["id"],
        subtitle=RAW_ITEM["subtitle"],
        timestamp=RAW_ITEM["timestamp"],
        title=RAW_ITEM["title"],
    )
    assert item.action.has_details() is True


def test_non_string_payload_has_no_details():
    action = ActivityLogAction(payload={"nested": 1}, type=RESPONSE_ACTION_TYPE_TIMELINE_DETAIL)

    assert action.payload_str() == ""
    assert action.has_details() is False


def test_other_action_type_has_no_details():
    action = ActivityLogAction(payload="entry-id", type="browserModal")

    assert action.payload_str() == "entry-id"
    assert action.has_details() is False


def test_missing_action_gives_empty_action():
    item = parse_activity_log_item({"id": "entry-id"})

    assert item.action == ActivityLogAction()
    assert item.action.has_details() is False


def test_wrong_field_type_raises():
    with pytest.raises(ValueError):
        parse_activity_log_item({"id": 5})


def test_client_lists_items_of_every_page():
    second = dict(RAW_ITEM, id="second-id")
    reader = FakeReader(
        {"items": [RAW_ITEM], "cursors": {"before": "", "after": "next"}},
        {"items": [second], "cursors": {"before": "next"}},
    )

    items = ActivityLogClient(reader).list()

    assert [item.id for item in items] == ["entry-id", "second-id"]
    assert reader.calls == [("timelineActivityLog", None), ("timelineActivityLog", {"after": "next"})]
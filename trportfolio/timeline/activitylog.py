"""Timeline activity log: its entries and the list client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trportfolio.api.wsclient import WSClient
from trportfolio.constants import RESPONSE_ACTION_TYPE_TIMELINE_DETAIL
from trportfolio.reader import ResponseReader

REQUEST_DATA_TYPE = "timelineActivityLog"


@dataclass(frozen=True)
class ActivityLogAction:
    payload: Any = None
    type: str = ""

    def payload_str(self) -> str:
        """Return the payload if it is a string, otherwise an empty string."""
        return self.payload if isinstance(self.payload, str) else ""

    def has_details(self) -> bool:
        """Tell whether details can be fetched for the entry."""
        return self.type == RESPONSE_ACTION_TYPE_TIMELINE_DETAIL and self.payload_str() != ""


@dataclass(frozen=True)
class ActivityLogItem:
    """One entry of the activity log."""

    action: ActivityLogAction = field(default_factory=ActivityLogAction)
    event_type: str = ""
    icon: str = ""
    id: str = ""
    subtitle: str = ""
    timestamp: str = ""
    title: str = ""


def _mapping(data: Any, name: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{name} is not an object: {data!r}")
    return data


def _string(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} is not a string: {value!r}")
    return value


def parse_activity_log_item(data: Any) -> ActivityLogItem:
    """Build an :class:`ActivityLogItem` from its decoded JSON object."""
    item = _mapping(data, "activity log item")
    action = _mapping(item.get("action"), "action")
    return ActivityLogItem(
        action=ActivityLogAction(payload=action.get("payload"), type=_string(action, "type")),
        event_type=_string(item, "eventType"),
        icon=_string(item, "icon"),
        id=_string(item, "id"),
        subtitle=_string(item, "subtitle"),
        timestamp=_string(item, "timestamp"),
        title=_string(item, "title"),
    )


class ActivityLogClient:
    """Lists the activity log."""

    def __init__(self, reader: ResponseReader) -> None:
        self._client = WSClient(REQUEST_DATA_TYPE, reader)

    def list(self) -> list[ActivityLogItem]:
        return [parse_activity_log_item(item) for item in self._client.list()]
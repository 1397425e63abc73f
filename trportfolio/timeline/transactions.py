"""Timeline transactions: list items, their event types and the list client."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from trportfolio.api.wsclient import WSClient
from trportfolio.constants import RESPONSE_ACTION_TYPE_TIMELINE_DETAIL
from trportfolio.reader import ResponseReader

REQUEST_DATA_TYPE = "timelineTransactions"


class EventType(str, Enum):
    PAYMENT_INBOUND = "PAYMENT_INBOUND"
    PAYMENT_INBOUND_SEPA_DIRECT_DEBIT = "PAYMENT_INBOUND_SEPA_DIRECT_DEBIT"
    PAYMENT_OUTBOUND = "PAYMENT_OUTBOUND"
    ORDER_EXECUTED = "ORDER_EXECUTED"
    TRADE_INVOICE_CREATED = "TRADE_INVOICE"
    SAVINGS_PLAN_EXECUTED = "SAVINGS_PLAN_EXECUTED"
    SAVINGS_PLAN_INVOICE_CREATED = "SAVINGS_PLAN_INVOICE_CREATED"
    INTEREST_PAYOUT_CREATED = "INTEREST_PAYOUT_CREATED"
    INTEREST_PAYOUT = "INTEREST_PAYOUT"
    CREDIT = "CREDIT"
    BENEFITS_SAVEBACK_EXECUTION = "benefits_saveback_execution"
    BENEFITS_SPARE_CHANGE_EXECUTION = "benefits_spare_change_execution"
    SSP_CORPORATE_ACTION_INVOICE_CASH = "ssp_corporate_action_invoice_cash"
    CARD_SUCCESSFUL_TRANSACTION = "card_successful_transaction"
    CARD_REFUND = "card_refund"


class UnsupportedEventTypeError(ValueError):
    """The event type of a timeline item is not handled."""


@dataclass(frozen=True)
class ResponseItemAction:
    payload: str = ""
    type: str = ""

    def has_details(self) -> bool:
        """Tell whether details can be fetched for the item."""
        return self.type == RESPONSE_ACTION_TYPE_TIMELINE_DETAIL and self.payload != ""


@dataclass(frozen=True)
class ResponseItemAmount:
    currency: str = ""
    fraction_digits: int = 0
    value: float = 0.0


@dataclass(frozen=True)
class ResponseItem:
    """One entry of the transactions timeline."""

    action: ResponseItemAction = field(default_factory=ResponseItemAction)
    amount: ResponseItemAmount = field(default_factory=ResponseItemAmount)
    badge: Any = None
    event_type: str = ""
    icon: str = ""
    id: str = ""
    status: str = ""
    sub_amount: ResponseItemAmount = field(default_factory=ResponseItemAmount)
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


def _number(data: dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} is not a number: {value!r}")
    return float(value)


def _amount(data: Any, name: str) -> ResponseItemAmount:
    amount = _mapping(data, name)
    digits = _number(amount, "fractionDigits")
    if digits != int(digits) or not 0 <= digits <= 255:
        raise ValueError(f"field 'fractionDigits' is out of range: {digits!r}")
    return ResponseItemAmount(
        currency=_string(amount, "currency"),
        fraction_digits=int(digits),
        value=_number(amount, "value"),
    )


def parse_response_item(data: Any) -> ResponseItem:
    """Build a :class:`ResponseItem` from its decoded JSON object."""
    item = _mapping(data, "transactions item")
    action = _mapping(item.get("action"), "action")
    return ResponseItem(
        action=ResponseItemAction(
            payload=_string(action, "payload"), type=_string(action, "type")
        ),
        amount=_amount(item.get("amount"), "amount"),
        badge=item.get("badge"),
        event_type=_string(item, "eventType"),
        icon=_string(item, "icon"),
        id=_string(item, "id"),
        status=_string(item, "status"),
        sub_amount=_amount(item.get("subAmount"), "subAmount"),
        subtitle=_string(item, "subtitle"),
        timestamp=_string(item, "timestamp"),
        title=_string(item, "title"),
    )


class TransactionsClient:
    """Lists the transactions timeline."""

    def __init__(self, reader: ResponseReader) -> None:
        self._client = WSClient(REQUEST_DATA_TYPE, reader)

    def list(self) -> list[ResponseItem]:
        return [parse_response_item(item) for item in self._client.list()]


_SUPPORTED_EVENT_TYPES = (
    EventType.PAYMENT_INBOUND,
    EventType.PAYMENT_INBOUND_SEPA_DIRECT_DEBIT,
    EventType.PAYMENT_OUTBOUND,
    EventType.ORDER_EXECUTED,
    EventType.TRADE_INVOICE_CREATED,
    EventType.SAVINGS_PLAN_EXECUTED,
    EventType.SAVINGS_PLAN_INVOICE_CREATED,
    EventType.INTEREST_PAYOUT_CREATED,
    EventType.INTEREST_PAYOUT,
    EventType.CREDIT,
    EventType.BENEFITS_SAVEBACK_EXECUTION,
    EventType.BENEFITS_SPARE_CHANGE_EXECUTION,
    EventType.SSP_CORPORATE_ACTION_INVOICE_CASH,
)


class EventTypeResolver:
    """Maps a timeline item to one of the supported event types."""

    def __init__(self) -> None:
        self._supported = _SUPPORTED_EVENT_TYPES

    def resolve(self, item: ResponseItem) -> EventType:
        for event_type in self._supported:
            if item.event_type == event_type.value:
                return event_type
        raise UnsupportedEventTypeError(f"unsupported event type: {item.event_type}")
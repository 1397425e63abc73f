import pytest

from trportfolio.api.websocket_reader import ErrorStateReceived
from trportfolio.portfolio.transaction import InsufficientDataError, UnsupportedResponseError
from trportfolio.portfolio.transaction_handler import TransactionHandler
from trportfolio.timeline.details import DetailsResponse
from trportfolio.timeline.normalizer import TransactionResponseNormalizer
from trportfolio.timeline.transactions import (
    EventType,
    EventTypeResolver,
    ResponseItem,
    ResponseItemAction,
)


def _item(item_id, event_type="ORDER_EXECUTED", action_type="timelineDetail"):
    return ResponseItem(
        action=ResponseItemAction(payload=item_id, type=action_type),
        id=item_id,
        event_type=event_type,
    )


def _details(item_id):
    return DetailsResponse(
        id=item_id,
        sections=[{"type": "header", "title": "t", "data": {"timestamp": "2023-09-25T08:45:00+0000"}}],
    )


class FakeListClient:
    def __init__(self, items):
        self.items = items

    def list(self):
        return list(self.items)


class FakeDetailsClient:
    def __init__(self, error=None):
        self.error = error
        self.requested = []

    def details(self, item_id):
        self.requested.append(item_id)
        if self.error is not None:
            raise self.error
        return _details(item_id)


class FakeProcessor:
    def __init__(self, errors=None):
        self.errors = errors or {}
        self.processed = []

    def process(self, event_type, response):
        if response.id in self.errors:
            raise self.errors[response.id]
        self.processed.append((event_type, response.id))


def _handler(items, details=None, processor=None):
    return TransactionHandler(
        FakeListClient(items),
        details or FakeDetailsClient(),
        TransactionResponseNormalizer(),
        EventTypeResolver(),
        processor or FakeProcessor(),
    )


def test_error_state_while_fetching_details_is_skipped():
    details = FakeDetailsClient(ErrorStateReceived("error state received"))
    handler = _handler([_item("0e5cf3cb-0f4d-4905-ae5f-ec0a530de6ca")], details)

    counter = handler.handle()

    assert details.requested == ["0e5cf3cb-0f4d-4905-ae5f-ec0a530de6ca"]
    assert counter.summary() == (1, 0, 1)


def test_processes_oldest_first():
    processor = FakeProcessor()
    counter = _handler([_item("newer"), _item("older")], processor=processor).handle()

    assert processor.processed == [
        (EventType.ORDER_EXECUTED, "older"),
        (EventType.ORDER_EXECUTED, "newer"),
    ]
    assert counter.processed == 2


def test_entries_without_details_are_not_counted():
    processor = FakeProcessor()
    counter = _handler([_item("a", action_type="other")], processor=processor).handle()

    assert processor.processed == []
    assert counter.summary() == (0, 0, 0)


def test_unsupported_event_type_is_skipped():
    processor = FakeProcessor()
    counter = _handler(
        [_item("card", event_type="card_successful_transaction")], processor=processor
    ).handle()

    assert processor.processed == []
    assert counter.skipped == 1


def test_builder_errors_are_skipped():
    processor = FakeProcessor(
        {
            "a": UnsupportedResponseError("unsupported response"),
            "b": InsufficientDataError("insufficient data resolved"),
        }
    )
    counter = _handler([_item("c"), _item("b"), _item("a")], processor=processor).handle()

    assert processor.processed == [(EventType.ORDER_EXECUTED, "c")]
    assert counter.summary() == (3, 1, 2)


def test_other_errors_propagate():
    processor = FakeProcessor({"a": RuntimeError("boom")})
    with pytest.raises(RuntimeError, match="boom"):
        _handler([_item("a")], processor=processor).handle()


def test_get_timeline_transactions_reverses_list():
    handler = _handler([_item("1"), _item("2"), _item("3")])
    assert [item.id for item in handler.get_timeline_transactions()] == ["3", "2", "1"]
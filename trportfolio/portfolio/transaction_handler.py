"""Downloading the transactions timeline and processing every entry."""

from __future__ import annotations

import logging
from typing import Protocol

from trportfolio.api.websocket_reader import ErrorStateReceived
from trportfolio.counter import OperationCounter
from trportfolio.portfolio.transaction import InsufficientDataError, UnsupportedResponseError
from trportfolio.timeline.details import DetailsResponse, NormalizedResponse
from trportfolio.timeline.transactions import (
    EventType,
    ResponseItem,
    UnsupportedEventTypeError,
)

logger = logging.getLogger(__name__)


class _ListClient(Protocol):
    def list(self) -> list[ResponseItem]: ...


class _DetailsClient(Protocol):
    def details(self, item_id: str) -> DetailsResponse: ...


class _Normalizer(Protocol):
    def normalize(self, response: DetailsResponse) -> NormalizedResponse: ...


class _EventTypeResolver(Protocol):
    def resolve(self, item: ResponseItem) -> EventType: ...


class _Processor(Protocol):
    def process(self, event_type: str, response: NormalizedResponse) -> None: ...


class TransactionHandler:
    """Processes the whole transactions timeline, oldest first."""

    def __init__(
        self,
        list_client: _ListClient,
        details_client: _DetailsClient,
        normalizer: _Normalizer,
        event_type_resolver: _EventTypeResolver,
        processor: _Processor,
    ) -> None:
        self._list_client = list_client
        self._details_client = details_client
        self._normalizer = normalizer
        self._event_type_resolver = event_type_resolver
        self._processor = processor

    def handle(self) -> OperationCounter:
        """Process every entry with details; skip those that cannot be handled."""
        counter = OperationCounter()

        for item in self.get_timeline_transactions():
            if not item.action.has_details():
                continue

            try:
                self.process_transaction_response(item)
            except ErrorStateReceived as error:
                logger.error("%s (id %s)", error, item.id)
                counter.add_skipped()
            except UnsupportedEventTypeError as error:
                logger.debug("%s", error)
                logger.warning("Unsupported transaction skipped (id %s)", item.id)
                counter.add_skipped()
            except UnsupportedResponseError:
                logger.warning("Unsupported transaction skipped (id %s)", item.id)
                counter.add_skipped()
            except InsufficientDataError as error:
                logger.warning(
                    "Transaction skipped due to missing details (id %s): %s", item.id, error
                )
                counter.add_skipped()
            else:
                counter.add_processed()

        logger.info("Transactions total: %d; completed: %d; skipped: %d", *counter.summary())
        return counter

    def get_timeline_transactions(self) -> list[ResponseItem]:
        """Download the timeline and return it oldest first."""
        logger.info("Downloading items")
        items = list(reversed(self._list_client.list()))
        logger.info("%d items downloaded", len(items))
        return items

    def process_transaction_response(self, item: ResponseItem) -> None:
        """Fetch, normalize and process the details of one timeline entry."""
        logger.info("Fetching transaction details (id %s)", item.id)
        response = self._details_client.details(item.action.payload)
        event_type = self._event_type_resolver.resolve(item)

        logger.info("Processing transaction details (id %s)", item.id)
        normalized = self._normalizer.normalize(response)
        self._processor.process(event_type, normalized)
        logger.info("Transaction processed (id %s)", item.id)
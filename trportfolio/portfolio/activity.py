"""Downloading the activity log and the documents of its entries."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from trportfolio.constants import ACTIVITY_LOG_DOCUMENTS_BASE_DIR
from trportfolio.counter import OperationCounter
from trportfolio.portfolio.document import Document, DocumentBuilder, DocumentExistsError
from trportfolio.timeline.activitylog import ActivityLogItem
from trportfolio.timeline.details import (
    RESPONSE_TIME_FORMAT,
    DetailsResponse,
    NormalizedResponse,
)

logger = logging.getLogger(__name__)


class _Downloader(Protocol):
    def download(self, base_dir: str | Path, document: Document) -> None: ...


class _ListClient(Protocol):
    def list(self) -> list[ActivityLogItem]: ...


class _DetailsClient(Protocol):
    def details(self, item_id: str) -> DetailsResponse: ...


class _Normalizer(Protocol):
    def normalize(self, response: DetailsResponse) -> NormalizedResponse: ...


class _Processor(Protocol):
    def process(self, response: NormalizedResponse) -> None: ...


class ActivityProcessor:
    """Downloads the documents of an activity log entry."""

    def __init__(
        self,
        builder: DocumentBuilder,
        downloader: _Downloader,
        documents_dir: str | Path = ACTIVITY_LOG_DOCUMENTS_BASE_DIR,
    ) -> None:
        self._builder = builder
        self._downloader = downloader
        self._documents_dir = documents_dir

    def process(self, response: NormalizedResponse) -> None:
        """Download every document of *response*; download failures are only logged."""
        timestamp_text = response.header.data.timestamp
        try:
            timestamp = datetime.strptime(timestamp_text, RESPONSE_TIME_FORMAT)
        except ValueError as error:
            raise ValueError(f"could not parse header section timestamp: {error}") from error

        for document in self._builder.build(response.id, timestamp, response):
            try:
                self._downloader.download(self._documents_dir, document)
            except DocumentExistsError:
                continue
            except OSError as error:
                logger.warning("Document downloader error (id %s): %s", response.id, error)


class ActivityHandler:
    """Processes the whole activity log, oldest first."""

    def __init__(
        self,
        list_client: _ListClient,
        details_client: _DetailsClient,
        normalizer: _Normalizer,
        processor: _Processor,
    ) -> None:
        self._list_client = list_client
        self._details_client = details_client
        self._normalizer = normalizer
        self._processor = processor

    def handle(self) -> OperationCounter:
        """Process every entry with details; skip those without usable details."""
        counter = OperationCounter()

        for entry in self.get_activity_log():
            if not entry.action.has_details():
                counter.add_skipped()
                continue

            logger.info("Fetching activity log entry details (id %s)", entry.id)
            details = self._details_client.details(entry.action.payload_str())

            try:
                normalized = self._normalizer.normalize(details)
            except (LookupError, ValueError):
                counter.add_skipped()
                continue

            self._processor.process(normalized)
            counter.add_processed()

        logger.info(
            "Activity log entries total: %d; completed %d; skipped: %d", *counter.summary()
        )
        return counter

    def get_activity_log(self) -> list[ActivityLogItem]:
        """Download the activity log and return it oldest first."""
        logger.info("Downloading activity log entries")
        entries = list(reversed(self._list_client.list()))
        logger.info("%d activity log entries downloaded", len(entries))
        return entries
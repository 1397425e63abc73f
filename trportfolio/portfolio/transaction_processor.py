"""Storing and exporting a single transaction."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from trportfolio.constants import CSV_FILENAME, TRANSACTION_DOCUMENTS_BASE_DIR
from trportfolio.portfolio.document import Document, DocumentExistsError
from trportfolio.portfolio.transaction import (
    Transaction,
    TransactionRepository,
    UnsupportedResponseError,
)
from trportfolio.timeline.details import NormalizedResponse

logger = logging.getLogger(__name__)


class _ModelBuilder(Protocol):
    def build(self) -> Transaction: ...


class _ModelBuilderFactory(Protocol):
    def create(self, event_type: str, response: NormalizedResponse) -> _ModelBuilder: ...


class _EntryFactory(Protocol):
    def make(self, transaction: Transaction) -> Any: ...


class _CSVReader(Protocol):
    def read(self, path: str | Path) -> Sequence[Any]: ...


class _CSVWriter(Protocol):
    def write(self, path: str | Path, entry: Any) -> None: ...


class _Downloader(Protocol):
    def download(self, base_dir: str | Path, document: Document) -> None: ...


class TransactionProcessor:
    """Builds, stores and exports a transaction and fetches its documents."""

    def __init__(
        self,
        builder_factory: _ModelBuilderFactory,
        repository: TransactionRepository,
        csv_factory: _EntryFactory,
        csv_reader: _CSVReader,
        csv_writer: _CSVWriter,
        downloader: _Downloader,
        csv_path: str | Path = CSV_FILENAME,
        documents_dir: str | Path = TRANSACTION_DOCUMENTS_BASE_DIR,
    ) -> None:
        self._builder_factory = builder_factory
        self._repository = repository
        self._csv_factory = csv_factory
        self._csv_reader = csv_reader
        self._csv_writer = csv_writer
        self._downloader = downloader
        self._csv_path = csv_path
        self._documents_dir = documents_dir

    def process(self, event_type: str, response: NormalizedResponse) -> None:
        """Handle *response* unless the CSV file already holds its transaction."""
        entries = self._csv_reader.read(self._csv_path)
        if any(entry.id == response.id for entry in entries):
            return

        try:
            builder = self._builder_factory.create(event_type, response)
        except UnsupportedResponseError as error:
            logger.debug("builder factory error (id %s): %s", response.id, error)
            raise

        transaction = builder.build()
        self._repository.create(transaction)
        entry = self._csv_factory.make(transaction)
        self._csv_writer.write(self._csv_path, entry)

        for document in transaction.documents:
            try:
                self._downloader.download(self._documents_dir, document)
            except DocumentExistsError:
                continue
            except OSError as error:
                logger.warning("Document downloader error (id %s): %s", response.id, error)
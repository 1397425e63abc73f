"""Documents attached to timeline entries: model, building and download."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import ClassVar

import requests

from trportfolio.timeline.details import NormalizedResponse

logger = logging.getLogger(__name__)

RESOLVER_TIME_FORMAT = "%d.%m.%Y"
DOWNLOADER_TIME_FORMAT = "%Y-%m"

_DIR_MODE = 0o700
_DATE_PATTERN = re.compile(r"\d{2}\.\d{2}\.\d{4}")
_CHUNK_SIZE = 64 * 1024


class DocumentExistsError(FileExistsError):
    """The document is already on disk."""


@dataclass
class Document:
    """A document belonging to a transaction or activity."""

    table_name: ClassVar[str] = "documents"
    primary_key: ClassVar[str] = "id"

    transaction_uuid: str = ""
    id: str = ""
    url: str = field(default="", metadata={"db": False})
    detail: str = ""
    title: str = ""
    filepath: str = ""


class DateResolver:
    """Finds the date a document belongs to."""

    def resolve(self, parent_timestamp: datetime, document_date: str) -> datetime:
        """Parse *document_date* as ``DD.MM.YYYY``, else fall back to *parent_timestamp*."""
        if _DATE_PATTERN.fullmatch(document_date) is None:
            return parent_timestamp
        try:
            parsed = datetime.strptime(document_date, RESOLVER_TIME_FORMAT)
        except ValueError:
            return parent_timestamp
        return parsed.replace(tzinfo=timezone.utc)


class DocumentBuilder:
    """Builds document models from the documents section of a response."""

    def __init__(self, date_resolver: DateResolver | None = None) -> None:
        self._date_resolver = date_resolver if date_resolver is not None else DateResolver()

    def build(
        self,
        transaction_uuid: str,
        parent_timestamp: datetime,
        response: NormalizedResponse,
    ) -> list[Document]:
        """Return a document for every entry whose payload is a URL string."""
        documents = []
        for entry in response.documents.data:
            url = entry.action.payload
            if not isinstance(url, str):
                continue
            date = self._date_resolver.resolve(parent_timestamp, entry.detail)
            filepath = f"{date.strftime(DOWNLOADER_TIME_FORMAT)}/{transaction_uuid}/{entry.title}.pdf"
            documents.append(
                Document(
                    transaction_uuid=transaction_uuid,
                    id=entry.id,
                    url=url,
                    detail=entry.detail,
                    title=entry.title,
                    filepath=filepath,
                )
            )
        return documents


class Downloader:
    """Downloads documents below a base directory."""

    def __init__(self, http: requests.Session | None = None, timeout: float = 60.0) -> None:
        self._http = http if http is not None else requests.Session()
        self._timeout = timeout

    def download(self, base_dir: str | Path, document: Document) -> None:
        """Save *document* at ``<base_dir>/<filepath>``; never overwrite."""
        dest = Path(f"{base_dir}/{document.filepath}")
        if dest.exists():
            logger.warning("Document already exists (id %s)", document.transaction_uuid)
            raise DocumentExistsError(f"document exists: {dest}")

        try:
            dest.parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        except OSError as error:
            raise OSError(f"could not create directory for document: {error}") from error

        try:
            response = self._http.get(document.url, stream=True, timeout=self._timeout)
        except requests.RequestException as error:
            raise OSError(f"could not download document: {error}") from error

        with response:
            try:
                out = open(dest, "wb")
            except OSError as error:
                raise OSError(f"could not create document file: {error}") from error
            with out:
                try:
                    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                        out.write(chunk)
                except OSError as error:
                    raise OSError(f"could not write document file: {error}") from error

        logger.info("Document downloaded (id %s)", document.transaction_uuid)
"""Sorting the untyped sections of a details response by their meaning."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from trportfolio.timeline.details import (
    SECTION_TITLE_OVERVIEW,
    SECTION_TITLE_PERFORMANCE,
    SECTION_TITLE_SAVING_PLAN,
    SECTION_TITLE_TRANSACTION,
    SECTION_TITLE_TRANSACTION_ALT,
    SECTION_TYPE_DOCUMENTS,
    SECTION_TYPE_HEADER,
    SECTION_TYPE_HORIZONTAL_TABLE,
    SECTION_TYPE_TABLE,
    DetailsResponse,
    DocumentsSection,
    HeaderSection,
    NormalizedResponse,
    TableSection,
    parse_documents_section,
    parse_header_section,
    parse_table_section,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SectionTypeNotFound(LookupError):
    """No section of the requested types is present."""


class SectionContainsNoType(ValueError):
    """A section carries no ``type`` field."""


def _select(response: DetailsResponse, section_types: tuple[str, ...]) -> list[dict[str, Any]]:
    selected = []
    for section in response.sections:
        if "type" not in section:
            raise SectionContainsNoType("section contains no type")
        section_type = section["type"]
        if not isinstance(section_type, str):
            raise ValueError(f"section type is not a string: {section_type!r}")
        if section_type in section_types:
            selected.append(section)

    if not selected:
        raise SectionTypeNotFound(f"section types {list(section_types)} were not found")
    return selected


def _deserialize(
    response: DetailsResponse, parse: Callable[[Any], T], *section_types: str
) -> list[T]:
    sections = _select(response, section_types)
    try:
        return [parse(section) for section in sections]
    except ValueError as error:
        raise ValueError(f"could not unmarshal {list(section_types)} section: {error}") from error


class TransactionResponseNormalizer:
    """Normalizes the details of a transaction."""

    def normalize(self, response: DetailsResponse) -> NormalizedResponse:
        """Sort the sections of *response*; only a missing header is fatal."""
        result = NormalizedResponse(id=response.id)

        try:
            result.header = self.section_header(response)
        except (LookupError, ValueError) as error:
            # The header is needed for every transaction.
            raise type(error)(f"could not deserialize header section: {error}") from error

        try:
            tables = self.sections_table(response)
        except (LookupError, ValueError) as error:
            logger.warning("could not deserialize table sections: %s", error)
            tables = []

        for table in tables:
            if table.title == SECTION_TITLE_OVERVIEW:
                result.overview = table
            elif table.title == SECTION_TITLE_PERFORMANCE:
                result.performance = table
            elif table.title in (SECTION_TITLE_TRANSACTION, SECTION_TITLE_TRANSACTION_ALT):
                result.transaction = table
            elif table.title != SECTION_TITLE_SAVING_PLAN:
                logger.warning("unknown section title: %s", table.title)

        try:
            result.documents = self.section_documents(response)
        except (LookupError, ValueError) as error:
            logger.debug("could not deserialize documents section: %s", error)

        return result

    def section_header(self, response: DetailsResponse) -> HeaderSection:
        """Return the first header section."""
        return _deserialize(response, parse_header_section, SECTION_TYPE_HEADER)[0]

    def sections_table(self, response: DetailsResponse) -> list[TableSection]:
        """Return every table and horizontal table section."""
        return _deserialize(
            response, parse_table_section, SECTION_TYPE_TABLE, SECTION_TYPE_HORIZONTAL_TABLE
        )

    def section_documents(self, response: DetailsResponse) -> DocumentsSection:
        """Return the first documents section."""
        return _deserialize(response, parse_documents_section, SECTION_TYPE_DOCUMENTS)[0]


class ActivityLogResponseNormalizer(TransactionResponseNormalizer):
    """Normalizes the details of an activity log entry: header and documents."""

    def normalize(self, response: DetailsResponse) -> NormalizedResponse:
        """Read header and documents; both are required."""
        result = NormalizedResponse(id=response.id)

        try:
            result.header = self.section_header(response)
        except (LookupError, ValueError) as error:
            raise type(error)(f"could not deserialize header section: {error}") from error

        try:
            result.documents = self.section_documents(response)
        except (LookupError, ValueError) as error:
            raise type(error)(f"could not deserialize documents section: {error}") from error

        return result
"""Timeline details: response sections and the details client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trportfolio.api.wsclient import WSClient
from trportfolio.reader import ResponseReader

REQUEST_DATA_TYPE = "timelineDetailV2"

RESPONSE_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
RESPONSE_TIME_FORMAT_ALT = "%Y-%m-%dT%H:%M:%S.%f%z"

SECTION_TYPE_HEADER = "header"
SECTION_TYPE_TABLE = "table"
SECTION_TYPE_HORIZONTAL_TABLE = "horizontalTable"
SECTION_TYPE_DOCUMENTS = "documents"

SECTION_TITLE_OVERVIEW = "Übersicht"
SECTION_TITLE_PERFORMANCE = "Performance"
SECTION_TITLE_TRANSACTION = "Transaktion"
SECTION_TITLE_TRANSACTION_ALT = "Geschäft"
SECTION_TITLE_SAVING_PLAN = "Sparplan"

OVERVIEW_DATA_TITLE_ORDER_TYPE = "Orderart"
OVERVIEW_DATA_TITLE_ASSET = "Asset"
OVERVIEW_DATA_TITLE_UNDERLYING_ASSET = "Basiswert"
OVERVIEW_DATA_TITLE_SECURITY = "Wertpapier"

TRANSACTION_DATA_TITLE_SHARES = "Anteile"
TRANSACTION_DATA_TITLE_SHARES_ALT = "Aktien"
TRANSACTION_DATA_TITLE_RATE = "Aktienkurs"
TRANSACTION_DATA_TITLE_RATE_ALT = "Anteilspreis"
TRANSACTION_DATA_TITLE_RATE_ALT2 = "Dividende je Aktie"
TRANSACTION_DATA_TITLE_RATE_ALT3 = "Dividende pro Aktie"
TRANSACTION_DATA_TITLE_COMMISSION = "Gebühr"
TRANSACTION_DATA_TITLE_TOTAL = "Gesamt"
TRANSACTION_DATA_TITLE_TAX = "Steuern"

PERFORMANCE_DATA_TITLE_YIELD = "Rendite"
PERFORMANCE_DATA_TITLE_PROFIT = "Gewinn"
PERFORMANCE_DATA_TITLE_LOSS = "Verlust"

ORDER_TYPE_TEXT_SALE = "Verkauf"
ORDER_TYPE_TEXT_PURCHASE = "Kauf"

TREND_NEGATIVE = "negative"


class SectionDataTitleNotFound(LookupError):
    """No entry of a table section carries any of the requested titles."""


@dataclass
class SectionAction:
    payload: Any = None
    type: str = ""


@dataclass
class HeaderSectionData:
    icon: str = ""
    status: str = ""
    subtitle_text: str = ""
    timestamp: str = ""


@dataclass
class HeaderSection:
    action: SectionAction = field(default_factory=SectionAction)
    data: HeaderSectionData = field(default_factory=HeaderSectionData)
    title: str = ""
    type: str = ""


@dataclass
class TableSectionDataDetail:
    action: SectionAction = field(default_factory=SectionAction)
    functional_style: str = ""
    amount: str = ""
    icon: str = ""
    status: str = ""
    subtitle: str = ""
    timestamp: str = ""
    title: str = ""
    text: str = ""
    trend: str = ""
    type: str = ""


@dataclass
class TableSectionData:
    detail: TableSectionDataDetail = field(default_factory=TableSectionDataDetail)
    style: str = ""
    title: str = ""


@dataclass
class TableSection:
    data: list[TableSectionData] = field(default_factory=list)
    title: str = ""
    type: str = ""

    def get_data_by_titles(self, *titles: str) -> TableSectionData:
        """Return the first entry whose title is one of *titles*."""
        for entry in self.data:
            if entry.title in titles:
                return entry
        raise SectionDataTitleNotFound(f"section data title not found ({list(titles)})")


@dataclass
class DocumentsSectionData:
    action: SectionAction = field(default_factory=SectionAction)
    detail: str = ""
    id: str = ""
    postbox_type: str = ""
    title: str = ""


@dataclass
class DocumentsSection:
    data: list[DocumentsSectionData] = field(default_factory=list)
    title: str = ""
    type: str = ""


@dataclass
class DetailsResponse:
    """Raw details response: an id and untyped sections."""

    id: str = ""
    sections: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class NormalizedResponse:
    """Details response with its sections sorted by meaning."""

    id: str = ""
    header: HeaderSection = field(default_factory=HeaderSection)
    overview: TableSection = field(default_factory=TableSection)
    performance: TableSection = field(default_factory=TableSection)
    transaction: TableSection = field(default_factory=TableSection)
    documents: DocumentsSection = field(default_factory=DocumentsSection)


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


def _list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} is not a list: {value!r}")
    return value


def _action(data: Any) -> SectionAction:
    action = _mapping(data, "action")
    return SectionAction(payload=action.get("payload"), type=_string(action, "type"))


def parse_header_section(data: Any) -> HeaderSection:
    """Build a :class:`HeaderSection` from its decoded JSON object."""
    section = _mapping(data, "header section")
    header_data = _mapping(section.get("data"), "header data")
    return HeaderSection(
        action=_action(section.get("action")),
        data=HeaderSectionData(
            icon=_string(header_data, "icon"),
            status=_string(header_data, "status"),
            subtitle_text=_string(header_data, "subtitleText"),
            timestamp=_string(header_data, "timestamp"),
        ),
        title=_string(section, "title"),
        type=_string(section, "type"),
    )


def _table_detail(data: Any) -> TableSectionDataDetail:
    detail = _mapping(data, "detail")
    return TableSectionDataDetail(
        action=_action(detail.get("action")),
        functional_style=_string(detail, "functionalStyle"),
        amount=_string(detail, "amount"),
        icon=_string(detail, "icon"),
        status=_string(detail, "status"),
        subtitle=_string(detail, "subtitle"),
        timestamp=_string(detail, "timestamp"),
        title=_string(detail, "title"),
        text=_string(detail, "text"),
        trend=_string(detail, "trend"),
        type=_string(detail, "type"),
    )


def parse_table_section(data: Any) -> TableSection:
    """Build a :class:`TableSection` from its decoded JSON object."""
    section = _mapping(data, "table section")
    entries = []
    for raw in _list(section, "data"):
        entry = _mapping(raw, "table data")
        entries.append(
            TableSectionData(
                detail=_table_detail(entry.get("detail")),
                style=_string(entry, "style"),
                title=_string(entry, "title"),
            )
        )
    return TableSection(data=entries, title=_string(section, "title"), type=_string(section, "type"))


def parse_documents_section(data: Any) -> DocumentsSection:
    """Build a :class:`DocumentsSection` from its decoded JSON object."""
    section = _mapping(data, "documents section")
    entries = []
    for raw in _list(section, "data"):
        entry = _mapping(raw, "document data")
        entries.append(
            DocumentsSectionData(
                action=_action(entry.get("action")),
                detail=_string(entry, "detail"),
                id=_string(entry, "id"),
                postbox_type=_string(entry, "postboxType"),
                title=_string(entry, "title"),
            )
        )
    return DocumentsSection(
        data=entries, title=_string(section, "title"), type=_string(section, "type")
    )


def parse_details_response(data: Any) -> DetailsResponse:
    """Build a :class:`DetailsResponse` from its decoded JSON object."""
    response = _mapping(data, "details response")
    sections = [dict(_mapping(raw, "section")) for raw in _list(response, "sections")]
    return DetailsResponse(id=_string(response, "id"), sections=sections)


class DetailsClient:
    """Fetches the details of timeline entries."""

    def __init__(self, reader: ResponseReader) -> None:
        self._client = WSClient(REQUEST_DATA_TYPE, reader)

    def details(self, item_id: str) -> DetailsResponse:
        return parse_details_response(self._client.details(item_id))
import json

import pytest

from trportfolio.timeline.details import (
    TRANSACTION_DATA_TITLE_SHARES,
    TRANSACTION_DATA_TITLE_SHARES_ALT,
    TRANSACTION_DATA_TITLE_TOTAL,
    DetailsClient,
    DetailsResponse,
    DocumentsSectionData,
    NormalizedResponse,
    SectionAction,
    SectionDataTitleNotFound,
    TableSection,
    TableSectionData,
    TableSectionDataDetail,
    parse_details_response,
    parse_documents_section,
    parse_header_section,
    parse_table_section,
)


class FakeReader:
    def __init__(self, payload):
        self.payload = json.dumps(payload).encode()
        self.calls = []

    def read(self, data_type, request):
        self.calls.append((data_type, request))
        return self.payload


def _entry(title, text):
    return TableSectionData(detail=TableSectionDataDetail(text=text), title=title)


def test_get_data_by_titles_returns_first_match():
    section = TableSection(
        data=[
            _entry(TRANSACTION_DATA_TITLE_TOTAL, "total"),
            _entry(TRANSACTION_DATA_TITLE_SHARES_ALT, "alt"),
            _entry(TRANSACTION_DATA_TITLE_SHARES, "main"),
        ]
    )

    found = section.get_data_by_titles(TRANSACTION_DATA_TITLE_SHARES, TRANSACTION_DATA_TITLE_SHARES_ALT)

    assert found.detail.text == "alt"


def test_get_data_by_titles_raises_when_missing():
    section = TableSection(data=[_entry(TRANSACTION_DATA_TITLE_TOTAL, "total")])

    with pytest.raises(SectionDataTitleNotFound):
        section.get_data_by_titles(TRANSACTION_DATA_TITLE_SHARES)


def test_empty_normalized_response_has_no_data():
    response = NormalizedResponse()

    with pytest.raises(SectionDataTitleNotFound):
        response.overview.get_data_by_titles(TRANSACTION_DATA_TITLE_TOTAL)


def test_parse_header_section():
    raw = {
        "action": {"payload": "isin-value", "type": "instrumentDetail"},
        "data": {
            "icon": "logos/icon/v2",
            "status": "executed",
            "subtitleText": "subtitle",
            "timestamp": "2024-01-01T10:00:00+0000",
        },
        "title": "header title",
        "type": "header",
    }

    section = parse_header_section(raw)

    assert section.action == SectionAction("isin-value", "instrumentDetail")
    assert section.data.icon == raw["data"]["icon"]
    assert section.data.status == raw["data"]["status"]
    assert section.data.subtitle_text == raw["data"]["subtitleText"]
    assert section.data.timestamp == raw["data"]["timestamp"]
    assert section.title == raw["title"]


def test_parse_table_section():
    raw = {
        "data": [
            {
                "detail": {"text": "1,00 €", "trend": "negative", "type": "text"},
                "style": "plain",
                "title": TRANSACTION_DATA_TITLE_TOTAL,
            }
        ],
        "title": "Transaktion",
        "type": "table",
    }

    section = parse_table_section(raw)

    entry = section.get_data_by_titles(TRANSACTION_DATA_TITLE_TOTAL)
    assert entry.detail.text == "1,00 €"
    assert entry.detail.trend == "negative"
    assert entry.style == "plain"
    assert section.title == raw["title"]


def test_parse_documents_section():
    raw = {
        "data": [
            {
                "action": {"payload": "https://example.com/doc.pdf", "type": "browserModal"},
                "detail": "01.02.2024",
                "id": "doc-id",
                "postboxType": "ORDER",
                "title": "Abrechnung",
            }
        ],
        "title": "Dokumente",
        "type": "documents",
    }

    section = parse_documents_section(raw)

    assert section.data == [
        DocumentsSectionData(
            action=SectionAction("https://example.com/doc.pdf", "browserModal"),
            detail="01.02.2024",
            id="doc-id",
            postbox_type="ORDER",
            title="Abrechnung",
        )
    ]


def test_parse_rejects_wrong_types():
    with pytest.raises(ValueError):
        parse_table_section({"data": "not a list"})
    with pytest.raises(ValueError):
        parse_details_response({"id": "x", "sections": {"type": "header"}})


def test_client_fetches_details_by_id():
    payload = {"id": "item-id", "sections": [{"type": "header", "title": "t"}]}
    reader = FakeReader(payload)

    response = DetailsClient(reader).details("item-id")

    assert response == DetailsResponse(id="item-id", sections=payload["sections"])
    assert reader.calls == [("timelineDetailV2", {"id": "item-id"})]
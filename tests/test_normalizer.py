import pytest

from trportfolio.timeline.details import (
    DetailsResponse,
    DocumentsSection,
    TableSection,
)
from trportfolio.timeline.normalizer import (
    ActivityLogResponseNormalizer,
    SectionContainsNoType,
    SectionTypeNotFound,
    TransactionResponseNormalizer,
)

HEADER = {
    "type": "header",
    "title": "Du hast 500,00 € erhalten",
    "action": {"type": "instrumentDetail", "payload": "DE000A0F5UF5"},
    "data": {
        "icon": "logos/DE000A0F5UF5/v2",
        "status": "executed",
        "timestamp": "2023-09-25T08:45:00+0000",
    },
}

DOCUMENTS = {
    "type": "documents",
    "title": "Dokumente",
    "data": [
        {
            "id": "doc-1",
            "title": "Abrechnung",
            "detail": "25.09.2023",
            "postboxType": "SECURITIES_SETTLEMENT",
            "action": {"type": "browserModal", "payload": "https://example.com/doc.pdf"},
        }
    ],
}


def _table(title, rows, kind="table"):
    return {
        "type": kind,
        "title": title,
        "data": [{"title": key, "detail": {"text": text, "type": "text"}} for key, text in rows],
    }


def test_normalize_sorts_sections_by_title():
    response = DetailsResponse(
        id="tx-1",
        sections=[
            HEADER,
            _table("Übersicht", [("Orderart", "Kauf")]),
            _table("Performance", [("Rendite", "+1,00 %")], kind="horizontalTable"),
            _table("Transaktion", [("Anteile", "2")]),
            DOCUMENTS,
        ],
    )

    result = TransactionResponseNormalizer().normalize(response)

    assert result.id == "tx-1"
    assert result.header.title == "Du hast 500,00 € erhalten"
    assert result.header.data.icon == "logos/DE000A0F5UF5/v2"
    assert result.header.action.payload == "DE000A0F5UF5"
    assert result.overview.get_data_by_titles("Orderart").detail.text == "Kauf"
    assert result.performance.get_data_by_titles("Rendite").detail.text == "+1,00 %"
    assert result.transaction.get_data_by_titles("Anteile").detail.text == "2"
    assert result.documents.data[0].id == "doc-1"
    assert result.documents.data[0].action.payload == "https://example.com/doc.pdf"


def test_alternative_transaction_title_is_recognised():
    response = DetailsResponse(id="tx-2", sections=[HEADER, _table("Geschäft", [("Gesamt", "1,00 €")])])

    result = TransactionResponseNormalizer().normalize(response)

    assert result.transaction.title == "Geschäft"
    assert result.transaction.data[0].detail.text == "1,00 €"


def test_unknown_and_saving_plan_tables_are_ignored():
    response = DetailsResponse(
        id="tx-3",
        sections=[HEADER, _table("Sparplan", [("Rhythmus", "monatlich")]), _table("Etwas", [])],
    )

    result = TransactionResponseNormalizer().normalize(response)

    assert result.overview == TableSection()
    assert result.performance == TableSection()
    assert result.transaction == TableSection()


def test_missing_documents_are_tolerated():
    response = DetailsResponse(id="tx-4", sections=[HEADER])

    result = TransactionResponseNormalizer().normalize(response)

    assert result.documents == DocumentsSection()
    assert result.header.data.status == "executed"


def test_missing_header_is_fatal():
    response = DetailsResponse(id="tx-5", sections=[DOCUMENTS])

    with pytest.raises(SectionTypeNotFound, match="header"):
        TransactionResponseNormalizer().normalize(response)


def test_section_without_type_is_rejected():
    response = DetailsResponse(id="tx-6", sections=[HEADER, {"title": "no type"}])

    with pytest.raises(SectionContainsNoType):
        TransactionResponseNormalizer().section_header(response)


def test_section_type_must_be_a_string():
    response = DetailsResponse(id="tx-7", sections=[{"type": 5}])

    with pytest.raises(ValueError, match="not a string"):
        TransactionResponseNormalizer().section_header(response)


def test_malformed_header_is_rejected():
    response = DetailsResponse(id="tx-8", sections=[{"type": "header", "data": ["x"]}])

    with pytest.raises(ValueError, match="could not deserialize header section"):
        TransactionResponseNormalizer().normalize(response)


def test_sections_table_returns_both_table_kinds_in_order():
    response = DetailsResponse(
        id="tx-9",
        sections=[
            _table("Übersicht", []),
            HEADER,
            _table("Performance", [], kind="horizontalTable"),
        ],
    )

    tables = TransactionResponseNormalizer().sections_table(response)

    assert [table.title for table in tables] == ["Übersicht", "Performance"]


def test_section_header_takes_the_first_header():
    second = dict(HEADER, title="second")
    response = DetailsResponse(id="tx-10", sections=[HEADER, second])

    header = TransactionResponseNormalizer().section_header(response)

    assert header.title == HEADER["title"]


def test_activity_normalizer_reads_header_and_documents_only():
    response = DetailsResponse(
        id="act-1", sections=[HEADER, _table("Übersicht", [("Orderart", "Kauf")]), DOCUMENTS]
    )

    result = ActivityLogResponseNormalizer().normalize(response)

    assert result.id == "act-1"
    assert result.header.title == HEADER["title"]
    assert result.documents.data[0].title == "Abrechnung"
    assert result.overview == TableSection()


def test_activity_normalizer_requires_documents():
    response = DetailsResponse(id="act-2", sections=[HEADER])

    with pytest.raises(SectionTypeNotFound, match="documents"):
        ActivityLogResponseNormalizer().normalize(response)
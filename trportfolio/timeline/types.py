"""Telling which kind of transaction a details response describes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from trportfolio.timeline.details import (
    ORDER_TYPE_TEXT_PURCHASE,
    ORDER_TYPE_TEXT_SALE,
    OVERVIEW_DATA_TITLE_ORDER_TYPE,
    NormalizedResponse,
    SectionDataTitleNotFound,
)
from trportfolio.timeline.transactions import EventType

logger = logging.getLogger(__name__)


class DetailsType(str, Enum):
    UNSUPPORTED = "Unsupported"
    SALE = "Sale"
    PURCHASE = "Purchase"
    DIVIDEND_PAYOUT = "Dividend payout"
    ROUND_UP = "Round up"
    SAVEBACK = "Saveback"
    CARD_PAYMENT = "Card payment"
    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    INTEREST_PAYOUT = "Interest payout"


class UnsupportedTypeError(ValueError):
    """No detector recognised the transaction."""


Detector = Callable[[str, NormalizedResponse], bool]


def _order_type_text(response: NormalizedResponse) -> str | None:
    try:
        return response.overview.get_data_by_titles(OVERVIEW_DATA_TITLE_ORDER_TYPE).detail.text
    except SectionDataTitleNotFound:
        return None


def purchase_detector(event_type: str, response: NormalizedResponse) -> bool:
    if event_type in (
        EventType.TRADE_INVOICE_CREATED,
        EventType.SAVINGS_PLAN_EXECUTED,
        EventType.SAVINGS_PLAN_INVOICE_CREATED,
    ):
        return True
    if event_type != EventType.ORDER_EXECUTED:
        return False
    text = _order_type_text(response)
    return text is not None and ORDER_TYPE_TEXT_PURCHASE in text


def sale_detector(event_type: str, response: NormalizedResponse) -> bool:
    if event_type != EventType.ORDER_EXECUTED:
        return False
    text = _order_type_text(response)
    return text is not None and ORDER_TYPE_TEXT_SALE in text


def round_up_detector(event_type: str, response: NormalizedResponse) -> bool:
    return event_type == EventType.BENEFITS_SPARE_CHANGE_EXECUTION


def saveback_detector(event_type: str, response: NormalizedResponse) -> bool:
    return event_type == EventType.BENEFITS_SAVEBACK_EXECUTION


def deposit_detector(event_type: str, response: NormalizedResponse) -> bool:
    return event_type in (EventType.PAYMENT_INBOUND, EventType.PAYMENT_INBOUND_SEPA_DIRECT_DEBIT)


def interest_payout_detector(event_type: str, response: NormalizedResponse) -> bool:
    return event_type in (EventType.INTEREST_PAYOUT_CREATED, EventType.INTEREST_PAYOUT)


def dividend_payout_detector(event_type: str, response: NormalizedResponse) -> bool:
    return event_type in (EventType.CREDIT, EventType.SSP_CORPORATE_ACTION_INVOICE_CASH)


def withdrawal_detector(event_type: str, response: NormalizedResponse) -> bool:
    return event_type == EventType.PAYMENT_OUTBOUND


class TypeResolver:
    """Runs the detectors in turn; the costliest come last."""

    def __init__(self) -> None:
        self._detectors: dict[DetailsType, Detector] = {
            DetailsType.DEPOSIT: deposit_detector,
            DetailsType.WITHDRAWAL: withdrawal_detector,
            DetailsType.DIVIDEND_PAYOUT: dividend_payout_detector,
            DetailsType.ROUND_UP: round_up_detector,
            DetailsType.SAVEBACK: saveback_detector,
            DetailsType.INTEREST_PAYOUT: interest_payout_detector,
            DetailsType.PURCHASE: purchase_detector,
            DetailsType.SALE: sale_detector,
        }

    def resolve(self, event_type: str, response: NormalizedResponse) -> DetailsType:
        """Return the type of the transaction in *response*."""
        for details_type, detector in self._detectors.items():
            if detector(event_type, response):
                logger.debug("%s transaction resolved (id %s)", details_type.value, response.id)
                return details_type
        raise UnsupportedTypeError("could not resolve transaction type")
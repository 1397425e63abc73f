"""Transactions as stored and exported."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar, Protocol

from trportfolio.portfolio.document import Document
from trportfolio.portfolio.instrument import Instrument

TYPE_PURCHASE = "Purchase"
TYPE_SALE = "Sale"
TYPE_DIVIDEND_PAYOUT = "Dividends"
TYPE_ROUND_UP = "Round up"
TYPE_SAVEBACK = "Saveback"
TYPE_DEPOSIT = "Deposit"
TYPE_WITHDRAWAL = "Withdrawal"
TYPE_INTEREST_PAYOUT = "Interest payout"

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class UnsupportedResponseError(ValueError):
    """The response describes a kind of transaction that is not handled."""


class InsufficientDataError(ValueError):
    """The response lacks data needed to build the transaction."""


class UnknownResponseError(ValueError):
    """The response describes an unknown kind of transaction."""


@dataclass
class Transaction:
    """A transaction of the portfolio, keyed by its UUID."""

    table_name: ClassVar[str] = "transactions"
    primary_key: ClassVar[str] = "uuid"

    uuid: str = ""
    instrument_isin: str | None = None
    instrument: Instrument = field(default_factory=Instrument)
    documents: list[Document] = field(default_factory=list, metadata={"db": False})
    type: str = ""
    timestamp: datetime = ZERO_TIME
    status: str = ""
    yield_: float = 0.0
    profit: float = 0.0
    shares: float = 0.0
    rate: float = 0.0
    commission: float = 0.0
    total: float = 0.0
    tax_amount: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TransactionRepository(Protocol):
    """Storage for transactions."""

    def create(self, model: Transaction) -> None: ...
"""Turning transactions into CSV entries."""

from __future__ import annotations

from enum import Enum

from trportfolio.csvfile import CSVEntry
from trportfolio.portfolio.transaction import (
    TYPE_DEPOSIT,
    TYPE_DIVIDEND_PAYOUT,
    TYPE_INTEREST_PAYOUT,
    TYPE_PURCHASE,
    TYPE_ROUND_UP,
    TYPE_SALE,
    TYPE_SAVEBACK,
    TYPE_WITHDRAWAL,
    Transaction,
)


class CSVEntryFactory:
    """Makes the CSV entry of a transaction, booking debit and credit by type."""

    def make(self, transaction: Transaction) -> CSVEntry:
        """Return the CSV entry; raise :class:`ValueError` for unsupported types."""
        debit = credit = tax_amount = invested_amount = 0.0
        shares = transaction.shares
        profit = transaction.profit
        total = transaction.total

        kind = transaction.type
        if kind == TYPE_PURCHASE:
            debit = total
            invested_amount = total - transaction.commission
        elif kind == TYPE_SALE:
            shares = -shares
            credit = total
            tax_amount = transaction.tax_amount
            invested_amount = -(total - transaction.profit + transaction.commission)
        elif kind in (TYPE_SAVEBACK, TYPE_DEPOSIT, TYPE_INTEREST_PAYOUT):
            credit = total
            tax_amount = transaction.tax_amount
        elif kind in (TYPE_ROUND_UP, TYPE_WITHDRAWAL):
            debit = total
        elif kind == TYPE_DIVIDEND_PAYOUT:
            profit = total
            credit = total
        else:
            raise ValueError(
                f"unsupported type '{kind}' received: unsupported value object received"
            )

        instrument = transaction.instrument
        asset_type = (
            instrument.type.value if isinstance(instrument.type, Enum) else str(instrument.type)
        )

        return CSVEntry(
            transaction.uuid,
            transaction.status,
            transaction.timestamp,
            kind,
            asset_type,
            instrument.name,
            instrument.isin,
            shares,
            transaction.rate,
            transaction.yield_,
            profit,
            transaction.commission,
            debit,
            credit,
            tax_amount,
            invested_amount,
            [document.filepath for document in transaction.documents],
        )
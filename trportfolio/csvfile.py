"""The transactions CSV file: its entries, reading and appending."""

from __future__ import annotations

import csv
import json
import logging
import math
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from trportfolio.timeutil import format_csv_datetime, parse_csv_datetime

logger = logging.getLogger(__name__)

_FILE_MODE = 0o600
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_COLUMNS = (
    ("ID", "id"),
    ("Status", "status"),
    ("Timestamp", "timestamp"),
    ("Type", "type"),
    ("Asset type", "asset_type"),
    ("Name", "name"),
    ("Instrument", "instrument"),
    ("Shares", "shares"),
    ("Rate", "rate"),
    ("Realized yield", "realized_yield"),
    ("Realized PnL", "profit"),
    ("Commission", "commission"),
    ("Debit", "debit"),
    ("Credit", "credit"),
    ("Tax amount", "tax_amount"),
    ("Documents", "documents"),
)
_TEXT_FIELDS = {"id", "status", "type", "asset_type", "name", "instrument"}


@dataclass
class CSVEntry:
    """One row of the transactions CSV file."""

    id: str = ""
    status: str = ""
    timestamp: datetime = _ZERO_TIME
    type: str = ""
    asset_type: str = ""
    name: str = ""
    instrument: str = ""
    shares: float = 0.0
    rate: float = 0.0
    realized_yield: float = 0.0
    profit: float = 0.0
    commission: float = 0.0
    debit: float = 0.0
    credit: float = 0.0
    tax_amount: float = 0.0
    invested_amount: float = 0.0
    documents: list[str] = field(default_factory=list)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _parse_float(raw: str) -> float:
    raw = raw.strip()
    return float(raw) if raw else 0.0


def _to_row(entry: CSVEntry) -> list[str]:
    row = []
    for _, attr in _COLUMNS:
        value = getattr(entry, attr)
        if attr == "timestamp":
            row.append(format_csv_datetime(value))
        elif attr == "documents":
            row.append(json.dumps(list(value), ensure_ascii=False))
        elif attr in _TEXT_FIELDS:
            row.append(value)
        else:
            row.append(_format_float(value))
    return row


def _from_record(record: dict[str, str]) -> CSVEntry:
    values: dict[str, object] = {}
    for header, attr in _COLUMNS:
        if header not in record:
            continue
        raw = record[header]
        if attr == "timestamp":
            values[attr] = parse_csv_datetime(raw)
        elif attr == "documents":
            documents = json.loads(raw) if raw.strip() else []
            if not isinstance(documents, list):
                raise ValueError(f"documents column is not a list: {raw!r}")
            values[attr] = [str(item) for item in documents]
        elif attr in _TEXT_FIELDS:
            values[attr] = raw
        else:
            values[attr] = _parse_float(raw)
    return CSVEntry(**values)


class CSVReader:
    """Reads all entries of a transactions CSV file."""

    def read(self, path: str | Path) -> list[CSVEntry]:
        """Return every entry in *path*; a missing file holds no entries."""
        try:
            handle = open(path, newline="", encoding="utf-8")
        except FileNotFoundError:
            return []

        with handle:
            rows = csv.reader(handle)
            try:
                header = next(rows)
            except StopIteration:
                raise ValueError("csv unmarshall error: empty csv file given") from None

            entries = []
            for row in rows:
                try:
                    entries.append(_from_record(dict(zip(header, row))))
                except ValueError as error:
                    raise ValueError(f"csv unmarshall error: {error}") from error
        return entries


class CSVWriter:
    """Appends entries to a transactions CSV file."""

    def write(self, path: str | Path, entry: CSVEntry) -> None:
        """Append *entry*, writing the header first when the file is new."""
        new_file = not os.path.exists(path)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, _FILE_MODE)
        with os.fdopen(fd, "a", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            if new_file:
                writer.writerow(header for header, _ in _COLUMNS)
            writer.writerow(_to_row(entry))
        logger.debug("appended entry %s to %s", entry.id, path)
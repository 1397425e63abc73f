"""Financial instruments and how their type is told."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

_ISIN_PREFIX_LENDING = "XS"
_ISIN_PREFIX_CRYPTO = "XF000"
_NAME_PREFIX_CASH = "Cash"
_NAME_SUFFIX_DIST = "(Dist)"
_NAME_SUFFIX_ACC = "(Acc)"

_ICON_ISIN_PATTERN = re.compile(r".*[^/]/([A-Z]{2}.*)/.*")


class NoMatchError(ValueError):
    """A value did not match the expected pattern."""


class InstrumentType(str, Enum):
    STOCKS = "Stocks"
    ETF = "ETF"
    CRYPTOCURRENCY = "Cryptocurrency"
    LENDING = "Lending"
    CASH = "Cash"
    OTHER = "Other"


@dataclass
class Instrument:
    """A financial instrument, keyed by its ISIN."""

    table_name: ClassVar[str] = "instruments"
    primary_key: ClassVar[str] = "isin"

    isin: str = ""
    name: str = ""
    icon: str = ""
    type: InstrumentType = InstrumentType.OTHER

    def icon_url(self) -> str:
        return f"https://assets.traderepublic.com/img/{self.icon}/light.min.svg"


class TypeResolver:
    """Tells the type of an instrument from its name and ISIN."""

    def resolve(self, instrument: Instrument) -> InstrumentType:
        name = instrument.name
        if name == "" or name.startswith(_NAME_PREFIX_CASH):
            return InstrumentType.CASH
        if name.endswith(_NAME_SUFFIX_DIST) or name.endswith(_NAME_SUFFIX_ACC):
            return InstrumentType.ETF
        if instrument.isin.startswith(_ISIN_PREFIX_CRYPTO):
            return InstrumentType.CRYPTOCURRENCY
        if instrument.isin.startswith(_ISIN_PREFIX_LENDING):
            return InstrumentType.LENDING
        return InstrumentType.OTHER


def extract_isin_from_icon(src: str) -> str:
    """Take the ISIN out of an icon path such as ``logos/<ISIN>/v2``."""
    match = _ICON_ISIN_PATTERN.search(src)
    if match is None:
        raise NoMatchError("value did not match the pattern")
    return match.group(1)
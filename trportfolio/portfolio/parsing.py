"""Parsing of amounts as the API prints them."""

from __future__ import annotations

import math
import re

_PERIOD_PATTERN = re.compile(r"^[^\d]*(\d+)\.?(\d*)\Z", re.ASCII)
_COMMA_PATTERN = re.compile(r"^\+?\s?(\d+)\.?(\d*),(\d+).*\Z", re.ASCII)
_NUMERIC_PATTERN = re.compile(r"(\d+\.?\d*,?\d+)", re.ASCII)


class NoMatchError(ValueError):
    """A value did not match the expected pattern."""


def _to_float(value: str) -> float:
    result = float(value)
    if math.isinf(result):
        raise ValueError(f"could not parse float from '{value}': value out of range")
    return result


def parse_float_with_period(src: str) -> float:
    """Parse a number written with a decimal point, such as ``1921.89``."""
    match = _PERIOD_PATTERN.search(src)
    if match is None:
        raise NoMatchError("value did not match the pattern")
    return _to_float(f"{match.group(1)}.{match.group(2)}")


def parse_float_with_comma(src: str, is_negative: bool = False) -> float:
    """Parse a number written the German way, such as ``1.921,89 €``."""
    match = _COMMA_PATTERN.search(src)
    if match is None:
        raise NoMatchError("value did not match the pattern")
    value = _to_float(f"{match.group(1)}{match.group(2)}.{match.group(3)}")
    return -value if is_negative else value


def parse_numeric_value_from_string(src: str) -> str:
    """Return the first number found in *src*, as written."""
    match = _NUMERIC_PATTERN.search(src)
    if match is None:
        raise NoMatchError("value did not match the pattern")
    return match.group(1)
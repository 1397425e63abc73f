"""Datetime handling for CSV files and the runtime time zone."""

from __future__ import annotations

import os
import re
from datetime import datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_MONTH_INDEX = {name.lower(): number for number, name in enumerate(_MONTHS, start=1)}

_PATTERN = re.compile(r"(\d{2}) ([A-Za-z]{3}) (\d{2}) (\d{2}):(\d{2}) ([+-])(\d{2})(\d{2})")


def local_timezone() -> tzinfo:
    """Return the time zone the program runs in."""
    name = os.environ.get("TZ", "").lstrip(":")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            pass
    zone = datetime.now().astimezone().tzinfo
    return zone if zone is not None else timezone.utc


def format_csv_datetime(value: datetime) -> str:
    """Format *value* in local time as ``02 Jan 06 15:04 -0700``."""
    local = value.astimezone(local_timezone())
    offset = local.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    minutes = abs(minutes)
    return (
        f"{local.day:02d} {_MONTHS[local.month - 1]} {local.year % 100:02d} "
        f"{local.hour:02d}:{local.minute:02d} {sign}{minutes // 60:02d}{minutes % 60:02d}"
    )


def parse_csv_datetime(text: str) -> datetime:
    """Parse a ``02 Jan 06 15:04 -0700`` string into an aware datetime."""
    match = _PATTERN.fullmatch(text)
    if match is None:
        raise ValueError(f"could not parse datetime: {text!r}")

    day, month_name, year, hour, minute, sign, off_hours, off_minutes = match.groups()
    month = _MONTH_INDEX.get(month_name.lower())
    if month is None:
        raise ValueError(f"could not parse datetime: unknown month {month_name!r}")

    short_year = int(year)
    full_year = 1900 + short_year if short_year >= 69 else 2000 + short_year
    offset = timedelta(hours=int(off_hours), minutes=int(off_minutes))
    if sign == "-":
        offset = -offset

    try:
        return datetime(
            full_year, month, int(day), int(hour), int(minute), tzinfo=timezone(offset)
        )
    except ValueError as error:
        raise ValueError(f"could not parse datetime: {error}") from error
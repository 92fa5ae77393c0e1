"""Normalizers for raw schedule / time-clock export values.

Everything here is pure and deterministic: no store access, no logging. Export
cells arrive as strings (the readers load every column with ``dtype=str``), so
each parser accepts ``None`` or arbitrary text and returns ``None`` (or ``0.0``
for currency) instead of raising.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

ALL_DAY = "all day"

_CLOCK_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*([ap]m)$", re.IGNORECASE)
_US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+[A-Za-z]{3}\.?)?$")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_WEEKDAY_DATE_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}\s+(Mon|Tue|Wed|Thu|Fri|Sat|Sun)", re.IGNORECASE)
_COLUMN_SUFFIX_RE = re.compile(r"[._]?\d+$")
_SITE_CODE_PREFIX_RE = re.compile(r"^\d+\s*[-–]\s*")


@dataclass(frozen=True)
class PersonName:
    first: str
    last: str

    @property
    def full(self) -> str:
        return f"{self.first} {self.last}".strip()


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def parse_clock_time(raw: Any) -> Optional[time]:
    """Parse a 12-hour clock string ("5:30am", "08:00 PM") into a time.

    Returns None for the "All Day" sentinel (no fixed time) and for anything
    that is not ``H:MM am/pm`` with hour 1-12 and minute 00-59.
    """
    text = _text(raw).lower()
    if not text or ALL_DAY in text:
        return None
    match = _CLOCK_TIME_RE.match(text)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2))
    if not 1 <= hour <= 12 or minute > 59:
        return None
    meridiem = match.group(3).lower()
    if meridiem == "pm" and hour < 12:
        hour += 12
    if meridiem == "am" and hour == 12:
        hour = 0
    return time(hour=hour, minute=minute)


def parse_export_date(raw: Any) -> Optional[date]:
    """Parse ``MM/DD/YYYY`` (optionally suffixed by a weekday) or an ISO date."""
    text = _text(raw)
    if not text:
        return None
    try:
        match = _US_DATE_RE.match(text)
        if match:
            return date(int(match.group(3)), int(match.group(1)), int(match.group(2)))
        match = _ISO_DATE_RE.match(text)
        if match:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None
    return None


def parse_person_name(raw: Any) -> Optional[PersonName]:
    parts = _text(raw).split()
    if not parts:
        return None
    return PersonName(first=parts[0], last=" ".join(parts[1:]))


def parse_currency(raw: Any) -> float:
    """Strip ``$`` and thousands separators; anything non-numeric becomes 0.0."""
    text = _text(raw).replace("$", "").replace(",", "")
    try:
        value = float(text)
    except ValueError:
        return 0.0
    if value != value or value in (float("inf"), float("-inf")):
        return 0.0
    return value


def parse_clock_timestamp(date_raw: Any, time_raw: Any) -> Optional[datetime]:
    """Combine an export date ("01/31/2026 Sat") and a clock time ("08:00 AM")."""
    day = parse_export_date(date_raw)
    if day is None:
        return None
    at = parse_clock_time(time_raw)
    if at is None:
        return None
    return datetime.combine(day, at)


def find_clock_date_column(row: Mapping[str, Any], base_name: str) -> str:
    """Pick the clock column among duplicate-named date columns.

    Time-clock exports carry two columns literally named "Start Date" (profile
    start date and clock date); readers mangle the second into "Start Date.1".
    When several candidates exist, the one holding ``MM/DD/YYYY <weekday>`` is the
    clock column; otherwise the last candidate wins.
    """
    wanted = base_name.strip().lower()
    candidates = [
        key for key in row.keys() if key == base_name or _COLUMN_SUFFIX_RE.sub("", str(key)).strip().lower() == wanted
    ]
    if len(candidates) <= 1:
        return candidates[0] if candidates else base_name

    for key in candidates:
        if _WEEKDAY_DATE_RE.search(_text(row.get(key))):
            return key
    return candidates[-1]


def normalize_full_name(first: str, last: str = "") -> str:
    return " ".join(f"{first or ''} {last or ''}".split()).lower()


def normalize_label(raw: Any) -> str:
    return " ".join(_text(raw).split()).lower()


def strip_site_code(label: Any) -> str:
    """Drop a leading site code: "02 - ELY PRODUCCION" -> "ELY PRODUCCION"."""
    return _SITE_CODE_PREFIX_RE.sub("", _text(label)).strip()


def cell_text(row: Mapping[str, Any], column: str) -> str:
    return _text(row.get(column))


def is_blank_row(row: Mapping[str, Any]) -> bool:
    return not any(_text(v) for v in row.values())

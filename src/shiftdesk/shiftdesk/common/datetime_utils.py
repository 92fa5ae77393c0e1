from __future__ import annotations

from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse a 24h HH:MM string into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_hhmm(value: time | None) -> str:
    return value.strftime("%H:%M") if value else ""


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def worked_hours(clock_in: datetime, clock_out: datetime | None, break_minutes: int = 0) -> float:
    if clock_out is None:
        return 0.0
    seconds = (clock_out - clock_in).total_seconds() - int(break_minutes or 0) * 60
    return round(max(seconds, 0) / 3600, 2)

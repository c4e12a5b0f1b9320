from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Naive local datetime; values carrying an offset are converted to local time first."""
    if not value:
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.replace(tzinfo=None)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment).replace(day=1)


def start_of_week(moment: datetime) -> datetime:
    """Sunday-based week start."""
    day = start_of_day(moment)
    return day - timedelta(days=(day.weekday() + 1) % 7)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    if month == 12:
        last_day = 31
    else:
        last_day = (date(year, month + 1, 1) - timedelta(days=1)).day
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None

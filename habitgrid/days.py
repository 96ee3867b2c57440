"""Calendar-day codec: day identifiers and day arithmetic.

Days are plain ``datetime.date`` values. Differences are taken between
``date`` objects, never between timestamps, so DST shifts cannot skew them.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, tzinfo

from habitgrid.errors import MalformedDateError

DAY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

WEEKDAY_LABELS = ("M", "T", "W", "T", "F", "S", "S")


def today(tz: tzinfo | None = None) -> date:
    """Current calendar day, in *tz* or the host's local calendar."""
    if tz is None:
        return date.today()
    return datetime.now(tz).date()


def parse_day(text: str) -> date:
    """Parse a strict 'YYYY-MM-DD' string."""
    if not isinstance(text, str):
        raise MalformedDateError(text)
    m = DAY_RE.match(text)
    if not m:
        raise MalformedDateError(text)
    year, month, day = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        raise MalformedDateError(text) from None


def format_day(day: date) -> str:
    return day.isoformat()


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def days_between(a: date, b: date) -> int:
    """Signed number of calendar days from *a* to *b*."""
    return (b - a).days


def start_of_week(day: date) -> date:
    """Monday on or before *day*."""
    return day - timedelta(days=day.isoweekday() - 1)


def week_days(day: date) -> list[date]:
    """The seven days (Mon..Sun) of the week containing *day*."""
    monday = start_of_week(day)
    return [monday + timedelta(days=i) for i in range(7)]


def days_in_month(year: int, month: int) -> int:
    """Number of days in *month* (1-12) of *year*."""
    return calendar.monthrange(year, month)[1]


def format_pretty(day: date) -> str:
    """'Friday, 16 October 2026'."""
    return f"{calendar.day_name[day.weekday()]}, {day.day:02d} {calendar.month_name[day.month]} {day.year}"

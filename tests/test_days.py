"""Tests for habitgrid/days.py — day identifiers and calendar arithmetic."""

from datetime import date, datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from habitgrid.days import (
    add_days,
    days_between,
    days_in_month,
    format_day,
    format_pretty,
    parse_day,
    start_of_week,
    today,
    week_days,
)
from habitgrid.errors import MalformedDateError


def test_parse_and_format():
    d = parse_day("2024-02-29")
    assert d == date(2024, 2, 29)
    assert format_day(d) == "2024-02-29"


@pytest.mark.parametrize("bad", [
    "2024-2-01",
    "2024-02-30",
    "2023-02-29",
    "2024-13-01",
    "2024-00-10",
    "NaN-01-01",
    "2024-01-01T00:00",
    "",
    None,
    20240101,
])
def test_parse_day_rejects_malformed(bad):
    with pytest.raises(MalformedDateError):
        parse_day(bad)


def test_malformed_is_value_error():
    with pytest.raises(ValueError):
        parse_day("yesterday")


def test_add_days_rollover():
    assert add_days(date(2024, 1, 31), 1) == date(2024, 2, 1)
    assert add_days(date(2024, 2, 28), 1) == date(2024, 2, 29)
    assert add_days(date(2023, 2, 28), 1) == date(2023, 3, 1)
    assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)
    assert add_days(date(2024, 3, 1), -1) == date(2024, 2, 29)


def test_days_between_signed():
    assert days_between(date(2024, 1, 1), date(2024, 1, 4)) == 3
    assert days_between(date(2024, 1, 4), date(2024, 1, 1)) == -3
    assert days_between(date(2024, 1, 1), date(2024, 1, 1)) == 0


def test_days_between_across_dst():
    # US spring-forward 2024-03-10 and EU fall-back 2024-10-27
    assert days_between(date(2024, 3, 9), date(2024, 3, 11)) == 2
    assert days_between(date(2024, 10, 26), date(2024, 10, 28)) == 2


def test_start_of_week_is_monday():
    assert start_of_week(date(2024, 1, 1)) == date(2024, 1, 1)  # Monday
    assert start_of_week(date(2024, 1, 7)) == date(2024, 1, 1)  # Sunday
    assert start_of_week(date(2024, 3, 1)) == date(2024, 2, 26)  # Friday


def test_week_days():
    week = week_days(date(2024, 1, 3))
    assert len(week) == 7
    assert week[0] == date(2024, 1, 1)
    assert week[-1] == date(2024, 1, 7)


def test_days_in_month():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2024, 4) == 30
    assert days_in_month(2024, 12) == 31


def test_today_discards_time_of_day():
    tz = ZoneInfo("America/Bogota")
    with patch("habitgrid.days.datetime") as mock_dt:
        mock_dt.now.return_value = datetime(2024, 3, 15, 23, 59, tzinfo=tz)
        assert today(tz) == date(2024, 3, 15)


def test_format_pretty():
    assert format_pretty(date(2024, 3, 15)) == "Friday, 15 March 2024"

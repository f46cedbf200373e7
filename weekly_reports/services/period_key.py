"""
Period Keys

A period key is the canonical text form of a custom week: 'Wnn-YYYY'
(e.g. 'W27-2025'). Three input shapes are accepted:

- 'W27-2025'    week key
- '2025-W27'    reversed week key
- '2025-06-22'  a calendar date, mapped through week math
"""

import re
from datetime import date
from typing import Union

from weekly_reports.errors import DateError, ParseError
from weekly_reports.services.week_math import (
    CustomWeek,
    DateInput,
    to_custom_week,
    week_range,
    weeks_in_year,
)


_WEEK_KEY = re.compile(r"^W(\d{2})-(\d{4})$")
_REVERSED_WEEK_KEY = re.compile(r"^(\d{4})-W(\d{2})$")
_DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PeriodInput = Union[str, date, CustomWeek]


def parse(text: str) -> CustomWeek:
    """
    Parse a period key into a CustomWeek.

    Raises:
        ParseError: If the text is not one of the accepted shapes, or names a
            week that does not exist in its year
    """
    if not isinstance(text, str):
        raise ParseError(repr(text), "expected a string")

    key = text.strip()

    match = _WEEK_KEY.match(key)
    if match:
        return _checked_week(text, int(match.group(2)), int(match.group(1)))

    match = _REVERSED_WEEK_KEY.match(key)
    if match:
        return _checked_week(text, int(match.group(1)), int(match.group(2)))

    if _DATE_KEY.match(key):
        try:
            return to_custom_week(key)
        except DateError as e:
            raise ParseError(text, "not a valid calendar date") from e

    raise ParseError(text)


def _checked_week(text: str, year: int, week: int) -> CustomWeek:
    try:
        last_week = weeks_in_year(year)
    except DateError as e:
        raise ParseError(text, "year out of range") from e
    if not 1 <= week <= last_week:
        raise ParseError(text, f"week must be between 1 and {last_week} for {year}")
    return CustomWeek(year, week)


def coerce(period: PeriodInput) -> CustomWeek:
    """Accept a CustomWeek, a date inside the week or any parseable period key."""
    if isinstance(period, CustomWeek):
        return period
    if isinstance(period, date):
        return to_custom_week(period)
    return parse(period)


def format(week: CustomWeek) -> str:
    """Format a CustomWeek as 'Wnn-YYYY'."""
    return f"W{week.week:02d}-{week.year}"


def from_date(value: DateInput) -> str:
    """Period key of the week containing a date."""
    return format(to_custom_week(value))


def label(period: PeriodInput) -> str:
    """
    Human label spanning the week's business days.

    'W26-2025' => 'Jun 22 - Jun 26, 2025'
    """
    start, end = week_range(coerce(period))
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"

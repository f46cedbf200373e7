"""
Custom Week Math

Business weeks run Sunday through Thursday. Every week is anchored on its
Wednesday:

- Sunday..Thursday => Wednesday of the same week
- Friday, Saturday => Wednesday of the following week

A week belongs to the calendar year of its Wednesday. Week 1 is the week whose
Wednesday is the first Wednesday on or after January 1st, which gives every
year 52 or 53 weeks and makes date <-> week conversion lossless.

Everything here is pure: no clock, no I/O, no logging.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Tuple, Union

from weekly_reports.errors import DateError


# Sunday = 0 ... Saturday = 6
WEDNESDAY = 3
THURSDAY = 4
BUSINESS_DAYS = 5

DateInput = Union[date, datetime, str]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, order=True)
class CustomWeek:
    """A (year, week) pair. Ordering is lexicographic on (year, week)."""
    year: int
    week: int

    def __str__(self) -> str:
        return f"W{self.week:02d}-{self.year}"


def to_calendar_date(value: DateInput) -> date:
    """
    Normalize a date input to a plain calendar date.

    Args:
        value: A date, a datetime (aware datetimes are converted to UTC first,
            naive ones are taken as UTC) or a 'YYYY-MM-DD' string

    Returns:
        The calendar date

    Raises:
        DateError: If the value is not a date or cannot be parsed
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _ISO_DATE.match(text):
            raise DateError(f"Invalid date: {value!r}")
        try:
            return date.fromisoformat(text)
        except ValueError as e:
            raise DateError(f"Invalid date: {value!r}") from e
    raise DateError(f"Invalid date: {value!r}")


def sunday_based_weekday(d: date) -> int:
    """Day of week with Sunday = 0 and Saturday = 6."""
    # weekday() returns 0 for Monday, 6 for Sunday
    return (d.weekday() + 1) % 7


def _anchor_wednesday(d: date) -> date:
    day = sunday_based_weekday(d)
    if day <= THURSDAY:
        return d + timedelta(days=WEDNESDAY - day)
    # Friday/Saturday roll into next week
    return d + timedelta(days=WEDNESDAY - day + 7)


def first_wednesday(year: int) -> date:
    """First Wednesday on or after January 1st of `year` (anchor of week 1)."""
    try:
        jan1 = date(year, 1, 1)
    except (TypeError, ValueError) as e:
        raise DateError(f"Invalid year: {year!r}") from e
    return jan1 + timedelta(days=(WEDNESDAY - sunday_based_weekday(jan1)) % 7)


def weeks_in_year(year: int) -> int:
    """Number of custom weeks in `year` (52 or 53)."""
    return (first_wednesday(year + 1) - first_wednesday(year)).days // 7


def to_custom_week(value: DateInput) -> CustomWeek:
    """
    Map a calendar date to its custom week.

    Args:
        value: Any input accepted by to_calendar_date

    Returns:
        The CustomWeek containing the date (Friday and Saturday count toward
        the following week)

    Raises:
        DateError: If the value is not a valid date
    """
    d = to_calendar_date(value)
    try:
        wednesday = _anchor_wednesday(d)
    except OverflowError as e:
        raise DateError(f"Date out of range: {d}") from e
    week = (wednesday - first_wednesday(wednesday.year)).days // 7 + 1
    return CustomWeek(wednesday.year, week)


def start_of_custom_week(year: int, week: int) -> date:
    """
    Get the Sunday that starts a custom week.

    Args:
        year: Custom week year
        week: Week number, 1..weeks_in_year(year)

    Returns:
        The Sunday of that week

    Raises:
        DateError: If the week number is out of range for the year
    """
    if not isinstance(week, int) or isinstance(week, bool):
        raise DateError(f"Invalid week number: {week!r}")
    last_week = weeks_in_year(year)
    if not 1 <= week <= last_week:
        raise DateError(f"Week {week} is out of range for {year} (1-{last_week})")
    wednesday = first_wednesday(year) + timedelta(weeks=week - 1)
    return wednesday - timedelta(days=WEDNESDAY)


def end_of_custom_week(year: int, week: int) -> date:
    """Get the Thursday that ends a custom week."""
    return start_of_custom_week(year, week) + timedelta(days=BUSINESS_DAYS - 1)


def week_range(week: CustomWeek) -> Tuple[date, date]:
    """Sunday and Thursday of a custom week."""
    start = start_of_custom_week(week.year, week.week)
    return start, start + timedelta(days=BUSINESS_DAYS - 1)


def shift_week(week: CustomWeek, weeks: int) -> CustomWeek:
    """Move `weeks` weeks forward (or backward if negative), across years."""
    start = start_of_custom_week(week.year, week.week)
    return to_custom_week(start + timedelta(weeks=weeks))

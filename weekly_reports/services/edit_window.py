"""
Edit Window Policy

Only the current custom week and the one right after it accept writes; the
next week is unlocked early for forward planning. Everything older is locked
as past, everything later as future.

The policy is advisory. It decides whether a write may happen and never
prevents reading an existing report for a locked week.
"""

import enum
from dataclasses import dataclass
from datetime import date
from typing import List

from weekly_reports.errors import WeekLockedError
from weekly_reports.services import period_key
from weekly_reports.services.week_math import (
    CustomWeek,
    DateInput,
    shift_week,
    to_custom_week,
    week_range,
)


class EditStatus(str, enum.Enum):
    EDITABLE = "editable"
    LOCKED_FUTURE = "locked_future"
    LOCKED_PAST = "locked_past"


def classify(today: DateInput, candidate: CustomWeek) -> EditStatus:
    """
    Decide whether a week is editable relative to today.

    Comparison is on (year, week) order, never on date differences.
    """
    current = to_custom_week(today)
    if candidate < current:
        return EditStatus.LOCKED_PAST
    if candidate == current or candidate == shift_week(current, 1):
        return EditStatus.EDITABLE
    return EditStatus.LOCKED_FUTURE


def is_editable(today: DateInput, candidate: CustomWeek) -> bool:
    return classify(today, candidate) is EditStatus.EDITABLE


def ensure_editable(today: DateInput, candidate: CustomWeek) -> None:
    """Raise WeekLockedError unless the week is inside the edit window."""
    status = classify(today, candidate)
    if status is not EditStatus.EDITABLE:
        raise WeekLockedError(period_key.format(candidate), status.value)


@dataclass(frozen=True)
class WeekOption:
    """One entry of the week selector."""
    week: CustomWeek
    key: str
    label: str
    start: date
    end: date
    status: EditStatus
    is_current: bool
    is_next: bool

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "year": self.week.year,
            "week": self.week.week,
            "label": self.label,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "status": self.status.value,
            "is_current": self.is_current,
            "is_next": self.is_next,
        }


def list_week_options(today: DateInput, since: CustomWeek) -> List[WeekOption]:
    """
    List selectable weeks from `since` through next week, newest first.

    Weeks before `since` are never offered; if `since` is later than next
    week the list is empty.
    """
    current = to_custom_week(today)
    next_week = shift_week(current, 1)

    options = []
    week = since
    while week <= next_week:
        start, end = week_range(week)
        options.append(WeekOption(
            week=week,
            key=period_key.format(week),
            label=period_key.label(week),
            start=start,
            end=end,
            status=classify(today, week),
            is_current=week == current,
            is_next=week == next_week,
        ))
        week = shift_week(week, 1)

    options.reverse()
    return options

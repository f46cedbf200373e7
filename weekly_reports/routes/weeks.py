"""
Weeks Router

Week selector data for the presentation layer: period keys, labels, date
ranges and edit-window status.
"""

import os
from datetime import datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends

from weekly_reports.clock import as_utc
from weekly_reports.dependencies import get_clock
from weekly_reports.errors import ParseError
from weekly_reports.services import edit_window, period_key
from weekly_reports.services.week_math import CustomWeek, to_custom_week, week_range

router = APIRouter(prefix="/weeks", tags=["weeks"])


def load_weeks_since(value: str) -> CustomWeek:
    """Parse the REPORT_WEEKS_SINCE setting. A bad value stops the app at import."""
    try:
        return period_key.parse(value)
    except ParseError as e:
        raise RuntimeError(f"Invalid REPORT_WEEKS_SINCE={value!r}: {e}") from e


# Earliest week offered by the selector
REPORT_WEEKS_SINCE = load_weeks_since(os.getenv("REPORT_WEEKS_SINCE", "W26-2025"))


@router.get("")
async def list_weeks(
    since: Optional[str] = None,
    now: Callable[[], datetime] = Depends(get_clock),
):
    """
    Selectable weeks, newest first.

    Query params:
        since: Earliest week to list (any period key shape). Defaults to
            REPORT_WEEKS_SINCE.
    """
    today = as_utc(now()).date()
    first = period_key.parse(since) if since else REPORT_WEEKS_SINCE
    options = edit_window.list_week_options(today, first)
    return {
        "current": period_key.from_date(today),
        "weeks": [option.to_dict() for option in options],
    }


@router.get("/{period}")
async def get_week(period: str, now: Callable[[], datetime] = Depends(get_clock)):
    """Details and edit status for one week (Wnn-YYYY, YYYY-Wnn or YYYY-MM-DD)."""
    today = as_utc(now()).date()
    week = period_key.parse(period)
    start, end = week_range(week)
    status = edit_window.classify(today, week)
    return {
        "key": period_key.format(week),
        "year": week.year,
        "week": week.week,
        "label": period_key.label(week),
        "start": start.isoformat(),
        "end": end.isoformat(),
        "status": status.value,
        "editable": status is edit_window.EditStatus.EDITABLE,
        "is_current": week == to_custom_week(today),
    }

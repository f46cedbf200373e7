from datetime import datetime
from typing import Callable

from fastapi import Depends
from sqlalchemy.orm import Session

from weekly_reports.clock import utc_now
from weekly_reports.database import get_db
from weekly_reports.services.report_repository import SqlReportRepository
from weekly_reports.services.report_resolver import ReportResolver


def get_clock() -> Callable[[], datetime]:
    """Clock used for "today" in edit-window decisions and issue timestamps."""
    return utc_now


def get_resolver(
    db: Session = Depends(get_db),
    now: Callable[[], datetime] = Depends(get_clock),
) -> ReportResolver:
    return ReportResolver(SqlReportRepository(db), now=now)

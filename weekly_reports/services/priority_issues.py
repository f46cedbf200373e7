"""
Priority Issues Service

Collects urgent issues that need a manager (requires_action and not yet
completed) across weekly reports, with their aging.

Aging buckets:
- more than 7 days => critical
- more than 3 days => warning
- otherwise        => normal
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from weekly_reports.clock import utc_now
from weekly_reports.services.issue_ledger import UrgentIssue, aging_days


SORT_FIELDS = ("aging", "created", "business_unit")


@dataclass(frozen=True)
class PriorityIssue:
    issue: UrgentIssue
    business_unit: str
    division: str
    period_key: str
    aging_days: int

    def to_dict(self) -> dict:
        data = self.issue.to_dict()
        data.update({
            "businessUnit": self.business_unit,
            "division": self.division,
            "week": self.period_key,
            "agingDays": self.aging_days,
            "aging": get_aging_status(self.aging_days),
        })
        return data


def get_aging_status(days: int) -> dict:
    """
    Get display information for an issue's age.

    Returns:
        Dictionary with:
        - status: 'critical', 'warning' or 'normal'
        - css_class: CSS class for styling
    """
    if days > 7:
        return {'status': 'critical', 'css_class': 'text-danger fw-bold'}
    elif days > 3:
        return {'status': 'warning', 'css_class': 'text-warning'}
    return {'status': 'normal', 'css_class': 'text-success'}


def collect_priority_issues(reports: Iterable, now: Optional[datetime] = None) -> List[PriorityIssue]:
    """Open action items from every report, in report order."""
    if now is None:
        now = utc_now()

    rows = []
    for report in reports:
        for issue in report.issues.open_action_items():
            rows.append(PriorityIssue(
                issue=issue,
                business_unit=report.business_unit,
                division=report.division,
                period_key=report.period_key,
                aging_days=aging_days(issue, now),
            ))
    return rows


def sort_priority_issues(
    rows: List[PriorityIssue],
    sort_by: str = "aging",
    descending: bool = True,
) -> List[PriorityIssue]:
    """
    Sort priority issues.

    Args:
        rows: Issues to sort
        sort_by: 'aging', 'created' or 'business_unit'
        descending: Largest first (oldest issues first for 'aging')

    Raises:
        ValueError: If sort_by is not a known field
    """
    if sort_by == "aging":
        key = lambda row: (row.aging_days, row.issue.timestamp)
    elif sort_by == "created":
        key = lambda row: row.issue.timestamp
    elif sort_by == "business_unit":
        key = lambda row: (row.business_unit.lower(), row.division.lower())
    else:
        raise ValueError(f"Unknown sort field '{sort_by}' (expected one of {', '.join(SORT_FIELDS)})")
    return sorted(rows, key=key, reverse=descending)

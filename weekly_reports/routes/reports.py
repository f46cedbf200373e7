"""
Reports Router

Read and submit weekly reports. Reports are addressed by
/reports/{business_unit}/{division}/{period}, where period is any period key
shape (W27-2025, 2025-W27 or a date inside the week).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from weekly_reports.services import edit_window, period_key
from weekly_reports.services.issue_ledger import IssueStatus, issue_from_dict
from weekly_reports.services.report_resolver import ReportFields, ReportResolver
from weekly_reports.services.validators import validate_report_submission
from weekly_reports.dependencies import get_resolver

router = APIRouter(prefix="/reports", tags=["reports"])


class UrgentIssueIn(BaseModel):
    id: Optional[str] = None
    description: str = ""
    timestamp: Optional[str] = None
    requiresAction: bool = False
    status: Optional[str] = None
    completedAt: Optional[str] = None
    completedBy: Optional[str] = None
    submittedBy: Optional[str] = None


class ReportSubmissionRequest(BaseModel):
    submitted_by: str = ""
    highlight_of_week: Optional[str] = None
    business_development: Optional[str] = None
    planned_activities: Optional[str] = None
    urgent_issues: List[UrgentIssueIn] = []


class IssueStatusRequest(BaseModel):
    status: IssueStatus
    actor: str


def _report_response(resolver: ReportResolver, report) -> dict:
    status = resolver.edit_status(report.week)
    data = report.to_dict()
    data["edit_status"] = status.value
    data["editable"] = status is edit_window.EditStatus.EDITABLE
    return data


@router.get("")
async def list_reports(week: str, resolver: ReportResolver = Depends(get_resolver)):
    """All reports submitted for one week."""
    reports = resolver.reports_for_week(week)
    return {
        "week": period_key.format(period_key.parse(week)),
        "reports": [report.to_dict() for report in reports],
    }


@router.get("/{business_unit}/{division}/{period}")
async def get_report(
    business_unit: str,
    division: str,
    period: str,
    resolver: ReportResolver = Depends(get_resolver),
):
    """The report for a business unit, division and week. Locked weeks stay readable."""
    report = resolver.resolve(business_unit, division, period)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return _report_response(resolver, report)


@router.post("/{business_unit}/{division}/{period}")
async def submit_report(
    business_unit: str,
    division: str,
    period: str,
    data: ReportSubmissionRequest,
    resolver: ReportResolver = Depends(get_resolver),
):
    """
    Create or update a weekly report.

    Blank text fields and an empty urgent issue list keep what was saved
    before. Returns the stored report as re-read after the write.
    """
    payload = data.model_dump()
    validation = validate_report_submission(payload)
    validation.raise_if_invalid()

    actor = data.submitted_by.strip()
    now = resolver.now()
    issues = [
        issue_from_dict(item, default_submitter=actor, default_timestamp=now)
        for item in payload["urgent_issues"]
    ]

    resolver.submit(
        business_unit,
        division,
        period,
        ReportFields(
            highlight=data.highlight_of_week,
            business_development=data.business_development,
            planned_activities=data.planned_activities,
            urgent_issues=issues,
        ),
        actor=actor,
    )
    report = resolver.resolve(business_unit, division, period)

    response = _report_response(resolver, report)
    response["warnings"] = validation.warnings
    return response


@router.post("/{business_unit}/{division}/{period}/issues/{issue_id}/status")
async def update_issue_status(
    business_unit: str,
    division: str,
    period: str,
    issue_id: str,
    data: IssueStatusRequest,
    resolver: ReportResolver = Depends(get_resolver),
):
    """Manager status change for one urgent issue (Pending, Noted, Completed)."""
    report = resolver.transition_issue(
        business_unit, division, period, issue_id, data.status, data.actor.strip()
    )
    return _report_response(resolver, report)

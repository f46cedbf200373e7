from fastapi import APIRouter, Depends

from weekly_reports.dependencies import get_resolver
from weekly_reports.services.priority_issues import collect_priority_issues, sort_priority_issues
from weekly_reports.services.report_resolver import ReportResolver

router = APIRouter(prefix="/issues", tags=["issues"])


@router.get("/priority")
async def priority_issues(
    sort_by: str = "aging",
    descending: bool = True,
    resolver: ReportResolver = Depends(get_resolver),
):
    """Open urgent issues that need a manager, across all reports."""
    rows = collect_priority_issues(resolver.all_reports(), now=resolver.now())
    rows = sort_priority_issues(rows, sort_by=sort_by, descending=descending)
    return {"count": len(rows), "issues": [row.to_dict() for row in rows]}

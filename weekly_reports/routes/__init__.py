from weekly_reports.routes.weeks import router as weeks_router
from weekly_reports.routes.org_units import router as org_units_router
from weekly_reports.routes.reports import router as reports_router
from weekly_reports.routes.issues import router as issues_router

__all__ = [
    'weeks_router',
    'org_units_router',
    'reports_router',
    'issues_router',
]

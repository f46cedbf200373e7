from weekly_reports.models.business_unit import BusinessUnit, Division
from weekly_reports.models.weekly_report import WeeklyReport

__all__ = [
    "BusinessUnit",
    "Division",
    "WeeklyReport",
]

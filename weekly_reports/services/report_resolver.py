"""
Report Resolver

Finds "the report" for a (business unit, division, week) triple and applies
submissions to it.

Merge rules for a submission:
- highlight / business development / planned activities: a non-blank value
  replaces the stored one, a blank value keeps it
- urgent issues: an empty list keeps the stored list. A non-empty list is
  applied issue by issue: saved issues keep their status unless a legal
  transition is submitted, new issues are appended, and leaving out a saved
  issue is an error

Writes go through the edit window. Reads never do.

Concurrent submits for the same triple are last-writer-wins at the storage
layer. Callers should resolve() again after submit() to see the stored state.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Tuple

from weekly_reports.clock import as_utc, utc_now
from weekly_reports.errors import ReportNotFoundError, ResolutionError
from weekly_reports.models import BusinessUnit, Division, WeeklyReport
from weekly_reports.services import edit_window, period_key
from weekly_reports.services.issue_ledger import (
    IssueLedger,
    IssueStatus,
    StoredShape,
    UrgentIssue,
    decode_issues,
    encode_issues,
)
from weekly_reports.services.period_key import PeriodInput
from weekly_reports.services.week_math import CustomWeek

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportFields:
    """A (possibly partial) submission. None and blank mean "keep stored"."""
    highlight: Optional[str] = None
    business_development: Optional[str] = None
    planned_activities: Optional[str] = None
    urgent_issues: Optional[Sequence[UrgentIssue]] = None


@dataclass(frozen=True)
class ReportContent:
    highlight: str
    business_development: str
    planned_activities: str
    issues: IssueLedger


@dataclass(frozen=True)
class Report:
    id: int
    business_unit: str
    division: str
    week: CustomWeek
    highlight: str
    business_development: str
    planned_activities: str
    submitted_by: str
    submitted_at: Optional[datetime]
    issues: IssueLedger

    @property
    def period_key(self) -> str:
        return period_key.format(self.week)

    @property
    def content(self) -> ReportContent:
        return ReportContent(
            highlight=self.highlight,
            business_development=self.business_development,
            planned_activities=self.planned_activities,
            issues=self.issues,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "business_unit": self.business_unit,
            "division": self.division,
            "week": self.period_key,
            "year": self.week.year,
            "week_number": self.week.week,
            "label": period_key.label(self.week),
            "highlight_of_week": self.highlight,
            "business_development": self.business_development,
            "planned_activities": self.planned_activities,
            "submitted_by": self.submitted_by,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "urgent_issues": [issue.to_dict() for issue in self.issues],
        }


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def merge_report_fields(
    existing: Optional[Report],
    fields: ReportFields,
    actor: str = "",
    now: Optional[datetime] = None,
) -> ReportContent:
    """
    Merge a submission into the stored content (see module docstring).

    Raises:
        InvalidTransitionError: If a submitted issue status change is not allowed
        IssueLockedError: If the submitted issue list leaves out a saved issue
    """
    def pick(submitted: Optional[str], stored: str) -> str:
        return stored if _is_blank(submitted) else submitted

    if existing is None:
        stored = ReportContent("", "", "", IssueLedger())
    else:
        stored = existing.content

    if fields.urgent_issues:
        issues = stored.issues.apply_submission(fields.urgent_issues, actor, now=now)
    else:
        issues = stored.issues

    return ReportContent(
        highlight=pick(fields.highlight, stored.highlight),
        business_development=pick(fields.business_development, stored.business_development),
        planned_activities=pick(fields.planned_activities, stored.planned_activities),
        issues=issues,
    )


class ReportResolver:
    """
    Args:
        repository: Report store (see SqlReportRepository)
        now: Clock returning the current time; "today" for the edit window is
            its UTC date
    """

    def __init__(self, repository, now: Callable[[], datetime] = utc_now):
        self.repository = repository
        self.now = now

    def today(self) -> date:
        return as_utc(self.now()).date()

    # ----------------------------
    # Lookups
    # ----------------------------

    def resolve_units(self, business_unit: str, division: str) -> Tuple[BusinessUnit, Division]:
        """
        Look up a business unit and one of its divisions by name.

        Raises:
            ResolutionError: If either name is unknown, or the division
                belongs to another business unit
        """
        bu_name = (business_unit or "").strip()
        division_name = (division or "").strip()

        unit = self.repository.find_business_unit(bu_name) if bu_name else None
        if unit is None:
            raise ResolutionError(f"Business unit not found: {business_unit!r}")

        found = self.repository.find_division(unit, division_name) if division_name else None
        if found is None:
            if division_name and self.repository.division_exists(division_name):
                raise ResolutionError(
                    f"Division {division!r} does not belong to business unit {unit.name!r}"
                )
            raise ResolutionError(f"Division not found: {division!r}")
        return unit, found

    def resolve(self, business_unit: str, division: str, period: PeriodInput) -> Optional[Report]:
        """Return the report for the triple, or None if none was submitted yet."""
        week = period_key.coerce(period)
        unit, found = self.resolve_units(business_unit, division)
        row = self.repository.find(unit, found, week.year, week.week)
        return self.to_report(row) if row is not None else None

    def reports_for_week(self, period: PeriodInput) -> List[Report]:
        week = period_key.coerce(period)
        return [self.to_report(row) for row in self.repository.list_for_week(week.year, week.week)]

    def all_reports(self) -> List[Report]:
        return [self.to_report(row) for row in self.repository.list_all()]

    def edit_status(self, period: PeriodInput) -> edit_window.EditStatus:
        return edit_window.classify(self.today(), period_key.coerce(period))

    # ----------------------------
    # Writes
    # ----------------------------

    def submit(
        self,
        business_unit: str,
        division: str,
        period: PeriodInput,
        fields: ReportFields,
        actor: str,
    ) -> Report:
        """
        Create or update the report for the triple.

        Raises:
            ParseError: If the period is not a valid week key
            ResolutionError: If the business unit or division is unknown
            WeekLockedError: If the week is outside the edit window
            InvalidTransitionError: If a submitted issue status change is not allowed
            IssueLockedError: If a saved urgent issue is left out
            StorageError: If the repository fails
        """
        if _is_blank(actor):
            raise ValueError("Submitted by is required")

        week = period_key.coerce(period)
        unit, found = self.resolve_units(business_unit, division)
        edit_window.ensure_editable(self.today(), week)

        row = self.repository.find(unit, found, week.year, week.week)
        existing = self.to_report(row) if row is not None else None
        merged = merge_report_fields(existing, fields, actor.strip(), now=self.now())

        if existing is not None and merged == existing.content:
            logger.info(
                f"Submit for {unit.name} / {found.name} {week} by {actor} changed nothing"
            )
            return existing

        stored = self.repository.upsert(unit, found, week, {
            "highlight": merged.highlight,
            "biz_dev": merged.business_development,
            "planned_next": merged.planned_activities,
            "urgent": encode_issues(merged.issues),
            "submitted_by": actor.strip(),
            "submitted_at": self.now(),
        })
        logger.info(
            f"{'Updated' if existing else 'Created'} report {stored.id} for "
            f"{unit.name} / {found.name} {week} by {actor} "
            f"({len(merged.issues)} urgent issues)"
        )
        return self.to_report(stored)

    def transition_issue(
        self,
        business_unit: str,
        division: str,
        period: PeriodInput,
        issue_id: str,
        new_status: IssueStatus,
        actor: str,
    ) -> Report:
        """
        Change the status of one urgent issue on a stored report.

        Status tracking follows up on issues that were already submitted, so
        it is allowed on locked weeks.
        """
        week = period_key.coerce(period)
        unit, found = self.resolve_units(business_unit, division)
        row = self.repository.find(unit, found, week.year, week.week)
        if row is None:
            raise ReportNotFoundError(f"No report for {unit.name} / {found.name} {week}")

        report = self.to_report(row)
        ledger = report.issues.transition(issue_id, new_status, actor, now=self.now())
        if ledger == report.issues:
            return report

        stored = self.repository.upsert(unit, found, week, {"urgent": encode_issues(ledger)})
        logger.info(
            f"Issue {issue_id} on report {stored.id} set to {IssueStatus(new_status).value} by {actor}"
        )
        return self.to_report(stored)

    # ----------------------------
    # Conversion
    # ----------------------------

    def to_report(self, row: WeeklyReport) -> Report:
        submitted_at = as_utc(row.submitted_at) if row.submitted_at else None
        decoded = decode_issues(
            row.urgent,
            default_submitter=row.submitted_by,
            default_timestamp=submitted_at or as_utc(row.created_at),
        )
        if decoded.shape is StoredShape.LEGACY_TEXT:
            logger.info(f"Report {row.id} holds legacy free-text urgent issues; read as one Pending issue")

        return Report(
            id=row.id,
            business_unit=row.business_unit.name,
            division=row.division.name,
            week=CustomWeek(row.custom_year, row.custom_week),
            highlight=row.highlight or "",
            business_development=row.biz_dev or "",
            planned_activities=row.planned_next or "",
            submitted_by=row.submitted_by or "",
            submitted_at=submitted_at,
            issues=decoded.ledger,
        )

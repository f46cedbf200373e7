"""
Report Repository

SQLAlchemy-backed store for weekly reports, keyed by
(business unit, division, custom year, custom week).

Every database failure is rolled back and re-raised as StorageError. Nothing
is retried here except the insert race described in `upsert`.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from weekly_reports.clock import as_utc
from weekly_reports.errors import StorageError
from weekly_reports.models import BusinessUnit, Division, WeeklyReport
from weekly_reports.services.week_math import CustomWeek, start_of_custom_week

logger = logging.getLogger(__name__)


class SqlReportRepository:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StorageError(f"Failed to {action}, try again") from e

    # ----------------------------
    # Business units / divisions
    # ----------------------------

    def list_business_units(self) -> List[BusinessUnit]:
        with self._storage("load business units"):
            return (
                self.db.query(BusinessUnit)
                .options(selectinload(BusinessUnit.divisions))
                .order_by(BusinessUnit.name)
                .all()
            )

    def find_business_unit(self, name: str) -> Optional[BusinessUnit]:
        with self._storage("load business unit"):
            return self.db.query(BusinessUnit).filter(BusinessUnit.name == name).first()

    def find_division(self, business_unit: BusinessUnit, name: str) -> Optional[Division]:
        with self._storage("load division"):
            return self.db.query(Division).filter(
                Division.business_unit_id == business_unit.id,
                Division.name == name,
            ).first()

    def division_exists(self, name: str) -> bool:
        with self._storage("load division"):
            return self.db.query(Division.id).filter(Division.name == name).first() is not None

    # ----------------------------
    # Reports
    # ----------------------------

    def _report_query(self):
        return self.db.query(WeeklyReport).options(
            selectinload(WeeklyReport.business_unit),
            selectinload(WeeklyReport.division),
        )

    def find(
        self,
        business_unit: BusinessUnit,
        division: Division,
        year: int,
        week: int,
    ) -> Optional[WeeklyReport]:
        """Fetch the unique report for a business unit, division and week."""
        with self._storage("load report"):
            return self._report_query().filter(
                WeeklyReport.business_unit_id == business_unit.id,
                WeeklyReport.division_id == division.id,
                WeeklyReport.custom_year == year,
                WeeklyReport.custom_week == week,
            ).first()

    def list_for_week(self, year: int, week: int) -> List[WeeklyReport]:
        with self._storage("load reports"):
            return (
                self._report_query()
                .filter(WeeklyReport.custom_year == year, WeeklyReport.custom_week == week)
                .order_by(WeeklyReport.business_unit_id, WeeklyReport.division_id)
                .all()
            )

    def list_all(self) -> List[WeeklyReport]:
        with self._storage("load reports"):
            return (
                self._report_query()
                .order_by(WeeklyReport.report_date.desc(), WeeklyReport.id)
                .all()
            )

    def upsert(
        self,
        business_unit: BusinessUnit,
        division: Division,
        week: CustomWeek,
        fields: Dict[str, Any],
    ) -> WeeklyReport:
        """
        Insert or update the report for a business unit, division and week.

        Only columns in WeeklyReport.CONTENT_FIELDS may be written. If another
        request inserts the same report between our read and our commit, the
        unique constraint fails and we overwrite that row instead, so the last
        writer wins.
        """
        unknown = set(fields) - set(WeeklyReport.CONTENT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown report fields: {', '.join(sorted(unknown))}")
        values = {name: _to_column_value(value) for name, value in fields.items()}

        with self._storage("save report"):
            report = self.find(business_unit, division, week.year, week.week)
            if report is None:
                report = WeeklyReport(
                    business_unit_id=business_unit.id,
                    division_id=division.id,
                    custom_year=week.year,
                    custom_week=week.week,
                    report_date=start_of_custom_week(week.year, week.week),
                )
                self.db.add(report)
            self._apply(report, values)

            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.warning(
                    f"Concurrent insert for {week} bu:{business_unit.id} div:{division.id}; "
                    f"overwriting the stored report"
                )
                report = self.find(business_unit, division, week.year, week.week)
                if report is None:
                    raise
                self._apply(report, values)
                self.db.commit()

            self.db.refresh(report)
            return report

    @staticmethod
    def _apply(report: WeeklyReport, values: Dict[str, Any]):
        for name, value in values.items():
            setattr(report, name, value)
        report.updated_at = datetime.utcnow()


def _to_column_value(value: Any) -> Any:
    # DateTime columns hold naive UTC
    if isinstance(value, datetime):
        return as_utc(value).replace(tzinfo=None)
    return value

"""
Weekly Report Model

One row per (business unit, division, custom week). The custom week is stored
both as (custom_year, custom_week), which is the natural key, and as
report_date, the Sunday the week starts on.

Urgent issues are persisted as a single JSON array in `urgent`. Older rows
hold free text there; see services/issue_ledger.py for decoding.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from weekly_reports.database import Base


class WeeklyReport(Base):
    __tablename__ = "weekly_reports"

    id = Column(Integer, primary_key=True)
    business_unit_id = Column(
        Integer, ForeignKey("business_units.id"), nullable=False, index=True
    )
    division_id = Column(Integer, ForeignKey("divisions.id"), nullable=False, index=True)
    custom_year = Column(Integer, nullable=False)
    custom_week = Column(Integer, nullable=False)
    report_date = Column(Date, nullable=False, index=True)
    highlight = Column(Text, nullable=True)
    biz_dev = Column(Text, nullable=True)
    planned_next = Column(Text, nullable=True)
    urgent = Column(Text, nullable=True)
    submitted_by = Column(String(255), nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    business_unit = relationship("BusinessUnit", back_populates="reports")
    division = relationship("Division", back_populates="reports")

    # At most one report per business unit / division / week
    __table_args__ = (
        UniqueConstraint(
            "business_unit_id", "division_id", "custom_year", "custom_week",
            name="uq_weekly_report_period",
        ),
        Index("ix_weekly_reports_year_week", "custom_year", "custom_week"),
    )

    # Columns a submission may write
    CONTENT_FIELDS = ["highlight", "biz_dev", "planned_next", "urgent", "submitted_by", "submitted_at"]

    @property
    def period_key(self) -> str:
        return f"W{self.custom_week:02d}-{self.custom_year}"

    def __repr__(self):
        return f"<WeeklyReport {self.period_key} bu:{self.business_unit_id} div:{self.division_id}>"

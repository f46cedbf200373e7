"""
Shared fixtures: an in-memory SQLite database with a few business units and a
fixed clock (Monday 2025-06-23, custom week W26-2025).
"""

import pytest
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekly_reports.database import Base
from weekly_reports.models import BusinessUnit, Division
from weekly_reports.services.report_repository import SqlReportRepository
from weekly_reports.services.report_resolver import ReportResolver


# Monday of W26-2025
FIXED_NOW = datetime(2025, 6, 23, 10, 0, tzinfo=timezone.utc)

ORG_UNITS = {
    "Sales": ["Jordan Sales", "Saudi Sales"],
    "ERP": ["Oracle Fusion"],
    "Back Office & Support": ["Human Resources"],
}


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()

    for unit_name, division_names in ORG_UNITS.items():
        unit = BusinessUnit(name=unit_name)
        unit.divisions = [Division(name=name) for name in division_names]
        session.add(unit)
    session.commit()

    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def repository(db_session):
    return SqlReportRepository(db_session)


@pytest.fixture
def resolver(repository):
    return ReportResolver(repository, now=lambda: FIXED_NOW)

"""
Seed data for business units and their divisions.

Usage:
    python scripts/seed_org_units.py

Behavior:
    - Creates business units and divisions that do not exist yet
    - Never renames or deletes existing rows
    - Safe to run multiple times (idempotent)
"""

from weekly_reports.database import SessionLocal
from weekly_reports.models import BusinessUnit, Division


# Business unit => division names
ORG_UNITS = {
    "Next Generation Infrastructure": [
        "Cloud & Digital Services",
        "Data Driven Infrastructure",
        "Defense Solutions",
    ],
    "IP's": ["AMAN", "Image Links", "AccuLab"],
    "ERP": ["Oracle Fusion", "Oracle Technologies & DB"],
    "Enterprise Solutions": ["Data & AI"],
    "Back Office & Support": [
        "Human Resources",
        "Supply Chain",
        "PMO",
        "R&D",
        "Finance",
    ],
    "Sales": ["Jordan Sales", "Saudi Sales"],
}


def seed_org_units(db=None):
    """Create missing business units and divisions. Existing rows are kept."""
    owns_session = db is None
    if owns_session:
        db = SessionLocal()
    created = []
    skipped = []

    try:
        for unit_name, division_names in ORG_UNITS.items():
            unit = db.query(BusinessUnit).filter(BusinessUnit.name == unit_name).first()
            if unit:
                skipped.append(unit_name)
            else:
                unit = BusinessUnit(name=unit_name)
                db.add(unit)
                db.flush()
                created.append(unit_name)

            for division_name in division_names:
                exists = db.query(Division).filter(
                    Division.business_unit_id == unit.id,
                    Division.name == division_name,
                ).first()
                if exists:
                    skipped.append(f"{unit_name} / {division_name}")
                    continue
                db.add(Division(business_unit_id=unit.id, name=division_name))
                created.append(f"{unit_name} / {division_name}")

        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()

    return created, skipped

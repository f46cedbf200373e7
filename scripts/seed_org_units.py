#!/usr/bin/env python3
"""
Seed script to create the business units and their divisions.

Usage:
    # Point at the target database (defaults to the local SQLite file)
    export DATABASE_URL="postgresql://..."

    # Run the script
    python scripts/seed_org_units.py
"""
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from weekly_reports.database import init_db
from weekly_reports.seed import seed_org_units


if __name__ == "__main__":
    init_db()
    created, skipped = seed_org_units()

    print(f"\nCreated ({len(created)}):")
    for name in created:
        print(f"  + {name}")
    print(f"\nSkipped ({len(skipped)}) - already exist")

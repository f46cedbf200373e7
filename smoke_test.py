#!/usr/bin/env python3
"""
Smoke test for a Weekly Reports deployment
Tests that the main API routes are reachable and answer sensibly
"""
import os
import sys

import requests

# Base URL - override with SMOKE_BASE_URL
BASE_URL = os.getenv("SMOKE_BASE_URL", "http://localhost:8000")

# Routes to test
ROUTES = [
    ("/weeks", "Week selector"),
    ("/weeks/2025-06-23", "Week from date"),
    ("/org-units", "Org units"),
    ("/reports?week=W26-2025", "Reports by week"),
    ("/issues/priority", "Priority issues"),
]


def test_route(path, name):
    """Test a single route"""
    url = BASE_URL + path
    try:
        response = requests.get(url, timeout=10)
        if response.status_code == 200:
            print(f"✓ {name:20} - OK (200)")
            return True
        else:
            print(f"✗ {name:20} - FAILED (Status: {response.status_code})")
            return False
    except requests.exceptions.RequestException as e:
        print(f"✗ {name:20} - ERROR: {str(e)}")
        return False


def test_bad_week_key():
    """An unknown period key must be rejected, never read as today"""
    try:
        response = requests.get(BASE_URL + "/weeks/next-tuesday", timeout=10)
    except requests.exceptions.RequestException as e:
        print(f"✗ {'Bad week key':20} - ERROR: {str(e)}")
        return False
    if response.status_code == 400:
        print(f"✓ {'Bad week key':20} - OK (400)")
        return True
    print(f"✗ {'Bad week key':20} - FAILED (Status: {response.status_code})")
    return False


def main():
    """Run smoke tests"""
    print(f"\nRunning smoke tests on {BASE_URL}\n")
    print("-" * 50)

    results = []
    for path, name in ROUTES:
        results.append(test_route(path, name))
    results.append(test_bad_week_key())

    print("-" * 50)
    passed = sum(results)
    total = len(results)
    print(f"\nPassed: {passed}/{total}")

    if passed == total:
        print("All smoke tests passed!")
        sys.exit(0)
    else:
        print("Some tests failed")
        sys.exit(1)


if __name__ == "__main__":
    main()

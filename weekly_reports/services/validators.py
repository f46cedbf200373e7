"""
Submission Validators

Validation for weekly report submissions before they reach the resolver.
Errors block the submission; warnings are returned to the caller.
"""

from typing import Any, Dict, List


class ValidationResult:
    """Container for validation results including warnings."""
    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self):
        """Raise ValueError if there are blocking errors."""
        if self.errors:
            raise ValueError("; ".join(self.errors))


def _is_empty(value: Any) -> bool:
    """Check if value is None or empty string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


MAX_TEXT_LENGTH = 10000
TEXT_FIELDS = {
    "highlight_of_week": "Highlight of the week",
    "business_development": "Business development",
    "planned_activities": "Planned activities",
}


def validate_report_submission(data: Dict[str, Any]) -> ValidationResult:
    """
    Validate a report submission.

    Required: submitted_by
    Required: a description on every urgent issue
    Block: text fields longer than MAX_TEXT_LENGTH
    Warn: nothing to submit (stored content is kept as is)

    Args:
        data: Dict with keys: submitted_by, highlight_of_week,
            business_development, planned_activities, urgent_issues

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    if _is_empty(data.get("submitted_by")):
        result.add_error("Submitted by is required")

    for field, name in TEXT_FIELDS.items():
        value = data.get(field)
        if isinstance(value, str) and len(value) > MAX_TEXT_LENGTH:
            result.add_error(f"{name} must be at most {MAX_TEXT_LENGTH} characters")

    issues = data.get("urgent_issues") or []
    for index, issue in enumerate(issues, start=1):
        if _is_empty(issue.get("description")):
            result.add_error(f"Urgent issue {index} needs a description")

    if not issues and all(_is_empty(data.get(field)) for field in TEXT_FIELDS):
        result.add_warning("Nothing to submit; previously saved content is kept")

    return result

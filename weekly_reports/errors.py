"""
Error taxonomy for weekly reports.

Every error is scoped to the operation that raised it. Routes translate them
into HTTP responses in `weekly_reports.main`.
"""


class ReportError(Exception):
    """Base class for all weekly report errors."""


class DateError(ReportError, ValueError):
    """A date input could not be interpreted as a calendar date."""


class ParseError(ReportError, ValueError):
    """A period key string is not in a recognized shape."""

    def __init__(self, text: str, reason: str = "unrecognized week key"):
        self.text = text
        super().__init__(f"Invalid week key {text!r}: {reason}")


class ResolutionError(ReportError, ValueError):
    """Unknown business unit or division name."""


class StorageError(ReportError):
    """The report repository failed to load or save."""


class WeekLockedError(ReportError):
    """A write was attempted against a week outside the edit window."""

    def __init__(self, period: str, status: str):
        self.period = period
        self.status = status
        super().__init__(f"Week {period} is not editable ({status})")


class IssueNotFoundError(ReportError, LookupError):
    """No urgent issue with the given id exists in the ledger."""


class InvalidTransitionError(ReportError):
    """The requested urgent issue status change is not allowed."""


class IssueLockedError(ReportError):
    """A persisted urgent issue cannot be removed."""


class ReportNotFoundError(ReportError, LookupError):
    """No report exists for the business unit, division and week."""

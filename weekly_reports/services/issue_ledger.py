"""
Urgent Issue Ledger

The ordered list of urgent issues attached to a weekly report.

Status lifecycle:
- Pending => Noted => Completed
- Pending => Completed
- Completed is terminal

Completing an issue records completed_at/completed_by; any other status
clears both. `is_completed` is derived from the status and never stored.

The ledger is persisted as one JSON array on the report row. Older rows hold
plain text instead, so decoding first classifies the stored value (empty,
JSON array or legacy text) and then builds issues for that shape.
"""

import enum
import json
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from weekly_reports.clock import as_utc, utc_now
from weekly_reports.errors import InvalidTransitionError, IssueLockedError, IssueNotFoundError


class IssueStatus(str, enum.Enum):
    PENDING = "Pending"
    NOTED = "Noted"
    COMPLETED = "Completed"


ALLOWED_TRANSITIONS = {
    IssueStatus.PENDING: {IssueStatus.NOTED, IssueStatus.COMPLETED},
    IssueStatus.NOTED: {IssueStatus.COMPLETED},
    IssueStatus.COMPLETED: set(),
}

UNKNOWN_SUBMITTER = "Unknown"


@dataclass(frozen=True)
class UrgentIssue:
    id: str
    description: str
    timestamp: datetime
    submitted_by: str
    requires_action: bool = False
    status: IssueStatus = IssueStatus.PENDING
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None

    def __post_init__(self):
        if self.status is IssueStatus.COMPLETED:
            if self.completed_at is None or not self.completed_by:
                raise ValueError(f"Completed issue {self.id} needs completed_at and completed_by")
        elif self.completed_at is not None or self.completed_by is not None:
            raise ValueError(f"{self.status.value} issue {self.id} cannot carry completion details")

    @property
    def is_completed(self) -> bool:
        return self.status is IssueStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Persisted (camelCase) shape."""
        return {
            "id": self.id,
            "description": self.description,
            "timestamp": _format_timestamp(self.timestamp),
            "requiresAction": self.requires_action,
            "status": self.status.value,
            "completedAt": _format_timestamp(self.completed_at),
            "completedBy": self.completed_by,
            "submittedBy": self.submitted_by,
        }


def new_issue(
    description: str,
    submitted_by: str,
    requires_action: bool = False,
    now: Optional[datetime] = None,
) -> UrgentIssue:
    """Create a fresh Pending issue with a generated id."""
    return UrgentIssue(
        id=uuid.uuid4().hex,
        description=description.strip(),
        timestamp=as_utc(now) if now else utc_now(),
        submitted_by=submitted_by,
        requires_action=requires_action,
    )


def aging_days(issue: UrgentIssue, now: Optional[datetime] = None) -> int:
    """Whole days since the issue was raised, floored, never negative."""
    now = as_utc(now) if now else utc_now()
    delta = now - as_utc(issue.timestamp)
    return max(delta.days, 0)


class IssueLedger:
    """
    Immutable ordered collection of urgent issues.

    Every mutating operation returns a new ledger. Issues listed in
    `persisted_ids` came from storage and can no longer be removed.
    """

    def __init__(self, issues: Iterable[UrgentIssue] = (), persisted_ids: Iterable[str] = ()):
        self._issues: Tuple[UrgentIssue, ...] = tuple(issues)
        ids = [issue.id for issue in self._issues]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate urgent issue ids in ledger")
        self._persisted: FrozenSet[str] = frozenset(persisted_ids)

    def __iter__(self) -> Iterator[UrgentIssue]:
        return iter(self._issues)

    def __len__(self) -> int:
        return len(self._issues)

    def __bool__(self) -> bool:
        return bool(self._issues)

    def __eq__(self, other) -> bool:
        if not isinstance(other, IssueLedger):
            return NotImplemented
        return self._issues == other._issues

    def __repr__(self):
        return f"<IssueLedger {len(self._issues)} issues>"

    @property
    def issues(self) -> List[UrgentIssue]:
        return list(self._issues)

    def get(self, issue_id: str) -> UrgentIssue:
        for issue in self._issues:
            if issue.id == issue_id:
                return issue
        raise IssueNotFoundError(f"Urgent issue {issue_id} not found")

    def is_persisted(self, issue_id: str) -> bool:
        return issue_id in self._persisted

    def mark_persisted(self) -> "IssueLedger":
        return IssueLedger(self._issues, persisted_ids={issue.id for issue in self._issues})

    def append(self, issue: UrgentIssue) -> "IssueLedger":
        return IssueLedger(self._issues + (issue,), self._persisted)

    def remove(self, issue_id: str) -> "IssueLedger":
        self.get(issue_id)
        if issue_id in self._persisted:
            raise IssueLockedError(f"Urgent issue {issue_id} is already saved and cannot be removed")
        return IssueLedger(
            (issue for issue in self._issues if issue.id != issue_id),
            self._persisted,
        )

    def transition(
        self,
        issue_id: str,
        new_status,
        actor: str,
        now: Optional[datetime] = None,
    ) -> "IssueLedger":
        """
        Move one issue to a new status.

        Args:
            issue_id: Id of the issue to update
            new_status: IssueStatus or its string value
            actor: Who is making the change (recorded on completion)
            now: Completion time (defaults to the current UTC time)

        Raises:
            IssueNotFoundError: If no issue has that id
            InvalidTransitionError: If the status change is not allowed
        """
        try:
            target = IssueStatus(new_status)
        except ValueError as e:
            raise InvalidTransitionError(f"Unknown status: {new_status!r}") from e

        issue = self.get(issue_id)
        if issue.status is target:
            return self
        if target not in ALLOWED_TRANSITIONS[issue.status]:
            raise InvalidTransitionError(
                f"Cannot move issue {issue_id} from {issue.status.value} to {target.value}"
            )

        if target is IssueStatus.COMPLETED:
            if not actor:
                raise InvalidTransitionError("Completing an issue requires an actor")
            updated = replace(
                issue,
                status=target,
                completed_at=as_utc(now) if now else utc_now(),
                completed_by=actor,
            )
        else:
            updated = replace(issue, status=target, completed_at=None, completed_by=None)

        return IssueLedger(
            (updated if i.id == issue_id else i for i in self._issues),
            self._persisted,
        )

    def apply_submission(
        self,
        submitted: Iterable[UrgentIssue],
        actor: str,
        now: Optional[datetime] = None,
    ) -> "IssueLedger":
        """
        Apply a resubmitted issue list to this ledger.

        Known ids keep their stored status and completion details; a
        different submitted status goes through `transition`. Description and
        requires_action may be edited. Unknown ids are appended. Ids missing
        from the submission are removed, which fails for persisted issues.

        Raises:
            InvalidTransitionError: If a submitted status change is not allowed
            IssueLockedError: If a persisted issue is left out
            ValueError: If the submission repeats an id
        """
        submitted = list(submitted)
        ids = [issue.id for issue in submitted]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate urgent issue ids in submission")

        ledger = self
        for issue in submitted:
            if issue.id not in {i.id for i in ledger._issues}:
                ledger = ledger.append(issue)
                continue
            stored = ledger.get(issue.id)
            edited = replace(
                stored,
                description=issue.description or stored.description,
                requires_action=issue.requires_action,
            )
            if edited != stored:
                ledger = IssueLedger(
                    (edited if i.id == issue.id else i for i in ledger._issues),
                    ledger._persisted,
                )
            ledger = ledger.transition(issue.id, issue.status, actor, now=now)

        for issue_id in [i.id for i in ledger._issues if i.id not in ids]:
            ledger = ledger.remove(issue_id)
        return ledger

    def open_action_items(self) -> List[UrgentIssue]:
        """Issues that need a manager and are not completed yet."""
        return [i for i in self._issues if i.requires_action and not i.is_completed]


# ============================================================
# SERIALIZATION
# ============================================================

class StoredShape(str, enum.Enum):
    EMPTY = "empty"
    JSON_ARRAY = "json_array"
    LEGACY_TEXT = "legacy_text"


@dataclass(frozen=True)
class DecodedLedger:
    shape: StoredShape
    ledger: IssueLedger


def classify_stored_value(raw: Any) -> Tuple[StoredShape, Any]:
    """
    Tag a stored urgent-issues value with its shape.

    Returns (shape, payload) where payload is None for EMPTY, a list for
    JSON_ARRAY and the trimmed text for LEGACY_TEXT. A value that looks like
    a JSON array but does not parse is LEGACY_TEXT.
    """
    if raw is None:
        return StoredShape.EMPTY, None
    if isinstance(raw, list):
        return StoredShape.JSON_ARRAY, raw

    text = str(raw).strip()
    if not text:
        return StoredShape.EMPTY, None

    if text.startswith("[") and text.endswith("]"):
        try:
            payload = json.loads(text)
        except ValueError:
            return StoredShape.LEGACY_TEXT, text
        if isinstance(payload, list):
            return StoredShape.JSON_ARRAY, payload

    return StoredShape.LEGACY_TEXT, text


def decode_issues(
    raw: Any,
    default_submitter: Optional[str] = None,
    default_timestamp: Optional[datetime] = None,
) -> DecodedLedger:
    """
    Decode a stored urgent-issues value into a ledger.

    Args:
        raw: The stored value (JSON text, legacy free text, a list, or None)
        default_submitter: Used for issues without a submitter
            (usually the report's submitter)
        default_timestamp: Used for issues without a valid timestamp
            (usually the report's submitted_at)

    Returns:
        DecodedLedger with the detected shape; every issue is marked persisted
    """
    submitter = default_submitter or UNKNOWN_SUBMITTER
    fallback_time = as_utc(default_timestamp) if default_timestamp else utc_now()

    shape, payload = classify_stored_value(raw)
    if shape is StoredShape.EMPTY:
        issues = []
    elif shape is StoredShape.LEGACY_TEXT:
        issues = [_legacy_issue(payload, submitter, fallback_time)]
    else:
        issues = []
        seen = set()
        for entry in payload:
            if isinstance(entry, dict):
                issue = issue_from_dict(entry, submitter, fallback_time)
            else:
                issue = _legacy_issue(str(entry), submitter, fallback_time)
            if issue.id in seen:
                issue = replace(issue, id=uuid.uuid4().hex)
            seen.add(issue.id)
            issues.append(issue)

    ledger = IssueLedger(issues).mark_persisted()
    return DecodedLedger(shape=shape, ledger=ledger)


def encode_issues(issues: Iterable[UrgentIssue]) -> str:
    """Serialize issues to the persisted JSON array text."""
    return json.dumps([issue.to_dict() for issue in issues])


def issue_from_dict(
    data: Dict[str, Any],
    default_submitter: str = UNKNOWN_SUBMITTER,
    default_timestamp: Optional[datetime] = None,
) -> UrgentIssue:
    """
    Build an issue from its camelCase dict, normalizing older records.

    - missing status is derived from the legacy isCompleted/completedBy fields
    - Completed without completion details is backfilled
    - any other status drops completion details
    """
    fallback_time = as_utc(default_timestamp) if default_timestamp else utc_now()
    timestamp = _parse_timestamp(data.get("timestamp")) or fallback_time
    status = _derive_status(data)

    completed_at = None
    completed_by = None
    if status is IssueStatus.COMPLETED:
        completed_at = _parse_timestamp(data.get("completedAt")) or timestamp
        completed_by = data.get("completedBy") or UNKNOWN_SUBMITTER

    return UrgentIssue(
        id=str(data.get("id") or "") or uuid.uuid4().hex,
        description=str(data.get("description") or ""),
        timestamp=timestamp,
        submitted_by=data.get("submittedBy") or default_submitter,
        requires_action=data.get("requiresAction") is True,
        status=status,
        completed_at=completed_at,
        completed_by=completed_by,
    )


def _derive_status(data: Dict[str, Any]) -> IssueStatus:
    raw_status = data.get("status")
    if raw_status:
        try:
            return IssueStatus(raw_status)
        except ValueError:
            pass
    if data.get("isCompleted") is True:
        return IssueStatus.COMPLETED
    if data.get("completedBy"):
        return IssueStatus.NOTED
    return IssueStatus.PENDING


def _legacy_issue(text: str, submitted_by: str, timestamp: datetime) -> UrgentIssue:
    # Same text always maps to the same id so re-reads stay stable
    return UrgentIssue(
        id="legacy-" + uuid.uuid5(uuid.NAMESPACE_URL, text).hex[:12],
        description=text,
        timestamp=timestamp,
        submitted_by=submitted_by,
    )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_utc(value)
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat().replace("+00:00", "Z")

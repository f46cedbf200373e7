"""
Unit tests for the urgent issue ledger.

Tests:
- Status lifecycle (Pending -> Noted -> Completed, Completed terminal)
- Aging in whole days
- Append/remove, including removal of persisted issues
- Decoding of JSON arrays, legacy free text and empty values
"""

import json
import pytest
from datetime import datetime, timezone
from weekly_reports.errors import InvalidTransitionError, IssueLockedError, IssueNotFoundError
from weekly_reports.services.issue_ledger import (
    IssueLedger,
    IssueStatus,
    StoredShape,
    UrgentIssue,
    aging_days,
    classify_stored_value,
    decode_issues,
    encode_issues,
    issue_from_dict,
    new_issue,
)


RAISED_AT = datetime(2025, 6, 20, 9, 0, tzinfo=timezone.utc)
NOW = datetime(2025, 6, 23, 10, 0, tzinfo=timezone.utc)


def make_issue(issue_id="i-1", **kwargs) -> UrgentIssue:
    values = dict(
        id=issue_id,
        description="Two key developers resigned",
        timestamp=RAISED_AT,
        submitted_by="Rania",
        requires_action=True,
    )
    values.update(kwargs)
    return UrgentIssue(**values)


class TestUrgentIssue:
    """Tests for the UrgentIssue invariants."""

    def test_is_completed_derived_from_status(self):
        assert make_issue().is_completed is False
        done = make_issue(status=IssueStatus.COMPLETED, completed_at=NOW, completed_by="BU Manager")
        assert done.is_completed is True

    def test_completed_requires_completion_details(self):
        with pytest.raises(ValueError):
            make_issue(status=IssueStatus.COMPLETED)

    def test_pending_cannot_carry_completion_details(self):
        with pytest.raises(ValueError):
            make_issue(completed_by="BU Manager")

    def test_new_issue_is_pending(self):
        issue = new_issue("  Server outage  ", submitted_by="Omar", requires_action=True, now=NOW)
        assert issue.status is IssueStatus.PENDING
        assert issue.description == "Server outage"
        assert issue.timestamp == NOW
        assert issue.id

    def test_to_dict_shape(self):
        data = make_issue().to_dict()
        assert data == {
            "id": "i-1",
            "description": "Two key developers resigned",
            "timestamp": "2025-06-20T09:00:00Z",
            "requiresAction": True,
            "status": "Pending",
            "completedAt": None,
            "completedBy": None,
            "submittedBy": "Rania",
        }


class TestTransition:
    """Tests for IssueLedger.transition."""

    def test_pending_to_noted(self):
        ledger = IssueLedger([make_issue()]).transition("i-1", IssueStatus.NOTED, "BU Manager", now=NOW)
        issue = ledger.get("i-1")
        assert issue.status is IssueStatus.NOTED
        assert issue.completed_at is None
        assert issue.completed_by is None

    def test_pending_to_completed_sets_details(self):
        ledger = IssueLedger([make_issue()]).transition("i-1", "Completed", "BU Manager", now=NOW)
        issue = ledger.get("i-1")
        assert issue.is_completed
        assert issue.completed_at == NOW
        assert issue.completed_by == "BU Manager"

    def test_noted_to_completed(self):
        ledger = IssueLedger([make_issue(status=IssueStatus.NOTED)])
        ledger = ledger.transition("i-1", IssueStatus.COMPLETED, "BU Manager", now=NOW)
        assert ledger.get("i-1").is_completed

    def test_completed_is_terminal(self):
        done = make_issue(status=IssueStatus.COMPLETED, completed_at=NOW, completed_by="BU Manager")
        ledger = IssueLedger([done])
        for target in (IssueStatus.PENDING, IssueStatus.NOTED):
            with pytest.raises(InvalidTransitionError):
                ledger.transition("i-1", target, "BU Manager")

    def test_noted_back_to_pending_not_allowed(self):
        ledger = IssueLedger([make_issue(status=IssueStatus.NOTED)])
        with pytest.raises(InvalidTransitionError):
            ledger.transition("i-1", IssueStatus.PENDING, "BU Manager")

    def test_same_status_is_noop(self):
        ledger = IssueLedger([make_issue()])
        assert ledger.transition("i-1", IssueStatus.PENDING, "BU Manager") is ledger

    def test_unknown_status_raises(self):
        with pytest.raises(InvalidTransitionError):
            IssueLedger([make_issue()]).transition("i-1", "Escalated", "BU Manager")

    def test_completion_requires_actor(self):
        with pytest.raises(InvalidTransitionError):
            IssueLedger([make_issue()]).transition("i-1", IssueStatus.COMPLETED, "")

    def test_unknown_issue_raises(self):
        with pytest.raises(IssueNotFoundError):
            IssueLedger([make_issue()]).transition("missing", IssueStatus.NOTED, "BU Manager")

    def test_transition_returns_new_ledger(self):
        ledger = IssueLedger([make_issue()])
        ledger.transition("i-1", IssueStatus.NOTED, "BU Manager")
        assert ledger.get("i-1").status is IssueStatus.PENDING


class TestAppendRemove:
    """Tests for IssueLedger.append and IssueLedger.remove."""

    def test_append_keeps_order(self):
        ledger = IssueLedger().append(make_issue("a")).append(make_issue("b"))
        assert [i.id for i in ledger] == ["a", "b"]

    def test_append_duplicate_id_raises(self):
        with pytest.raises(ValueError):
            IssueLedger([make_issue("a")]).append(make_issue("a"))

    def test_remove_unsaved_issue(self):
        ledger = IssueLedger([make_issue("a"), make_issue("b")]).remove("a")
        assert [i.id for i in ledger] == ["b"]

    def test_remove_persisted_issue_raises(self):
        ledger = IssueLedger([make_issue("a")]).mark_persisted()
        with pytest.raises(IssueLockedError):
            ledger.remove("a")

    def test_remove_new_issue_next_to_persisted(self):
        ledger = IssueLedger([make_issue("a")]).mark_persisted().append(make_issue("b"))
        assert [i.id for i in ledger.remove("b")] == ["a"]

    def test_remove_unknown_raises(self):
        with pytest.raises(IssueNotFoundError):
            IssueLedger().remove("a")

    def test_open_action_items(self):
        ledger = IssueLedger([
            make_issue("a"),
            make_issue("b", requires_action=False),
            make_issue("c", status=IssueStatus.COMPLETED, completed_at=NOW, completed_by="BU Manager"),
            make_issue("d", status=IssueStatus.NOTED),
        ])
        assert [i.id for i in ledger.open_action_items()] == ["a", "d"]


class TestAgingDays:
    """Tests for aging_days function."""

    def test_floors_whole_days(self):
        # Jun 20 09:00 -> Jun 23 10:00 is 3 days 1 hour
        assert aging_days(make_issue(), NOW) == 3

    def test_just_under_a_day(self):
        now = datetime(2025, 6, 21, 8, 59, tzinfo=timezone.utc)
        assert aging_days(make_issue(), now) == 0

    def test_future_timestamp_clamped_to_zero(self):
        now = datetime(2025, 6, 19, tzinfo=timezone.utc)
        assert aging_days(make_issue(), now) == 0

    def test_naive_datetimes_are_utc(self):
        assert aging_days(make_issue(), datetime(2025, 6, 23, 10, 0)) == 3


class TestClassifyStoredValue:
    """Tests for classify_stored_value function."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw):
        assert classify_stored_value(raw) == (StoredShape.EMPTY, None)

    def test_json_array(self):
        shape, payload = classify_stored_value('[{"id": "a"}]')
        assert shape is StoredShape.JSON_ARRAY
        assert payload == [{"id": "a"}]

    def test_plain_text(self):
        assert classify_stored_value("Server outage on Friday") == (
            StoredShape.LEGACY_TEXT, "Server outage on Friday"
        )

    def test_array_lookalike_that_fails_to_parse_is_text(self):
        assert classify_stored_value("[urgent] fix the VPN]") == (
            StoredShape.LEGACY_TEXT, "[urgent] fix the VPN]"
        )

    def test_json_object_is_text(self):
        shape, _ = classify_stored_value('{"id": "a"}')
        assert shape is StoredShape.LEGACY_TEXT


class TestDecodeIssues:
    """Tests for decode_issues and issue_from_dict."""

    def test_legacy_text_becomes_single_pending_issue(self):
        decoded = decode_issues("Server outage on Friday", default_submitter="Omar", default_timestamp=RAISED_AT)
        assert decoded.shape is StoredShape.LEGACY_TEXT
        assert len(decoded.ledger) == 1
        issue = decoded.ledger.issues[0]
        assert issue.status is IssueStatus.PENDING
        assert issue.requires_action is False
        assert issue.description == "Server outage on Friday"
        assert issue.submitted_by == "Omar"
        assert issue.timestamp == RAISED_AT

    def test_legacy_id_is_stable(self):
        first = decode_issues("Server outage on Friday").ledger.issues[0]
        second = decode_issues("Server outage on Friday").ledger.issues[0]
        assert first.id == second.id

    def test_empty_value_is_empty_ledger(self):
        decoded = decode_issues(None)
        assert decoded.shape is StoredShape.EMPTY
        assert len(decoded.ledger) == 0

    def test_json_array_decodes_issues(self):
        raw = encode_issues([make_issue("a"), make_issue("b", status=IssueStatus.NOTED)])
        decoded = decode_issues(raw)
        assert decoded.shape is StoredShape.JSON_ARRAY
        assert decoded.ledger.issues == [make_issue("a"), make_issue("b", status=IssueStatus.NOTED)]

    def test_decoded_issues_are_persisted(self):
        ledger = decode_issues(encode_issues([make_issue("a")])).ledger
        assert ledger.is_persisted("a")
        with pytest.raises(IssueLockedError):
            ledger.remove("a")

    def test_completed_without_completed_at_is_normalized(self):
        """A Completed issue always has completion details after loading."""
        raw = json.dumps([{
            "id": "a",
            "description": "Renew license",
            "timestamp": "2025-06-20T09:00:00Z",
            "requiresAction": True,
            "status": "Completed",
            "submittedBy": "Rania",
        }])
        issue = decode_issues(raw).ledger.get("a")
        assert issue.is_completed
        assert issue.completed_at == RAISED_AT
        assert issue.completed_by == "Unknown"

    def test_pending_with_completion_details_is_cleared(self):
        issue = issue_from_dict({
            "id": "a",
            "description": "x",
            "status": "Pending",
            "completedAt": "2025-06-21T00:00:00Z",
            "completedBy": "BU Manager",
        })
        assert issue.status is IssueStatus.PENDING
        assert issue.completed_at is None
        assert issue.completed_by is None

    def test_status_derived_from_legacy_flags(self):
        done = issue_from_dict({"id": "a", "description": "x", "isCompleted": True, "completedBy": "BU Manager"})
        noted = issue_from_dict({"id": "b", "description": "x", "isCompleted": False, "completedBy": "BU Manager"})
        pending = issue_from_dict({"id": "c", "description": "x"})
        assert done.status is IssueStatus.COMPLETED
        assert done.completed_by == "BU Manager"
        assert noted.status is IssueStatus.NOTED
        assert noted.completed_by is None
        assert pending.status is IssueStatus.PENDING

    def test_missing_fields_get_defaults(self):
        issue = issue_from_dict({"description": "x", "timestamp": "not a date"}, "Omar", RAISED_AT)
        assert issue.id
        assert issue.submitted_by == "Omar"
        assert issue.timestamp == RAISED_AT
        assert issue.requires_action is False

    def test_duplicate_ids_are_reassigned(self):
        raw = json.dumps([{"id": "a", "description": "x"}, {"id": "a", "description": "y"}])
        ids = [i.id for i in decode_issues(raw).ledger]
        assert ids[0] == "a"
        assert ids[1] != "a"

    def test_string_entries_become_issues(self):
        decoded = decode_issues('["Server outage"]')
        assert decoded.shape is StoredShape.JSON_ARRAY
        assert decoded.ledger.issues[0].description == "Server outage"

    def test_encode_then_decode_keeps_completion(self):
        done = make_issue(status=IssueStatus.COMPLETED, completed_at=NOW, completed_by="BU Manager")
        assert decode_issues(encode_issues([done])).ledger.get("i-1") == done


class TestApplySubmission:
    """Tests for IssueLedger.apply_submission."""

    def saved(self, *issues):
        return IssueLedger(issues).mark_persisted()

    def test_new_issues_appended(self):
        ledger = self.saved(make_issue("a")).apply_submission([make_issue("a"), make_issue("b")], "Rania")
        assert [i.id for i in ledger] == ["a", "b"]
        assert not ledger.is_persisted("b")

    def test_completed_cannot_be_reopened(self):
        done = make_issue("a", status=IssueStatus.COMPLETED, completed_at=NOW, completed_by="BU Manager")
        with pytest.raises(InvalidTransitionError):
            self.saved(done).apply_submission([make_issue("a")], "Rania")

    def test_stored_completion_kept(self):
        done = make_issue("a", status=IssueStatus.COMPLETED, completed_at=NOW, completed_by="BU Manager")
        resent = make_issue("a", status=IssueStatus.COMPLETED, completed_at=RAISED_AT, completed_by="Rania")
        issue = self.saved(done).apply_submission([resent], "Rania").get("a")
        assert issue.completed_by == "BU Manager"
        assert issue.completed_at == NOW

    def test_status_change_goes_through_transition(self):
        ledger = self.saved(make_issue("a")).apply_submission(
            [make_issue("a", status=IssueStatus.COMPLETED, completed_at=RAISED_AT, completed_by="Rania")],
            "Omar",
            now=NOW,
        )
        issue = ledger.get("a")
        assert issue.is_completed
        assert issue.completed_by == "Omar"
        assert issue.completed_at == NOW

    def test_description_and_action_flag_editable(self):
        ledger = self.saved(make_issue("a")).apply_submission(
            [make_issue("a", description="Three developers resigned", requires_action=False)], "Rania"
        )
        issue = ledger.get("a")
        assert issue.description == "Three developers resigned"
        assert issue.requires_action is False

    def test_leaving_out_saved_issue_raises(self):
        with pytest.raises(IssueLockedError):
            self.saved(make_issue("a")).apply_submission([make_issue("b")], "Rania")

    def test_leaving_out_unsaved_issue_allowed(self):
        ledger = IssueLedger([make_issue("a"), make_issue("b")]).apply_submission([make_issue("a")], "Rania")
        assert [i.id for i in ledger] == ["a"]

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            IssueLedger().apply_submission([make_issue("a"), make_issue("a")], "Rania")

"""
Tests for the Status Engine transition rules.

These tests verify:
- Rule tables cover every action
- Each request and student action's field changes
- Receipt numbers are assigned once and never replaced
- Hold/release round trips
- Student access decisions
"""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from registrar.core.events import EventType
from registrar.modules.document_requests.models import RequestStatus
from registrar.modules.status_engine import (
    ActionParams,
    RequestAction,
    RequestState,
    StudentAction,
    apply_request_action,
    apply_student_action,
    student_can_authenticate,
)
from registrar.modules.status_engine.engine import REQUEST_RULES, STUDENT_RULES
from registrar.modules.students.models import StudentStatus

NOW = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)


def _receipt_factory(now: datetime) -> str:
    return f"OR-{now.year}-4242"


def _request(action: RequestAction, status=RequestStatus.PENDING, receipt_no=None, **params):
    return apply_request_action(
        action,
        RequestState(status=status, receipt_no=receipt_no),
        ActionParams(now=NOW, **params),
        receipt_factory=_receipt_factory,
    )


# ============================================
# Rule tables
# ============================================


def test_request_rules_cover_every_action():
    assert set(REQUEST_RULES) == set(RequestAction)


def test_student_rules_cover_every_action():
    assert set(STUDENT_RULES) == set(StudentAction)


@pytest.mark.parametrize("action", list(RequestAction))
@pytest.mark.parametrize("status", list(RequestStatus))
def test_any_request_action_is_accepted_from_any_status(action, status):
    transition = _request(action, status=status, receipt_no="OR-2025-1111")

    assert transition.event == EventType.REQUEST_UPDATED
    assert transition.changes


# ============================================
# Request actions
# ============================================


def test_approve_pending_request_assigns_receipt():
    transition = _request(RequestAction.APPROVE)

    assert transition.changes == {
        "status": RequestStatus.PROCESSING,
        "payment_approved_at": NOW,
        "receipt_no": "OR-2026-4242",
    }


def test_approve_keeps_existing_receipt():
    transition = _request(
        RequestAction.APPROVE, status=RequestStatus.PROCESSING, receipt_no="OR-2025-1111"
    )

    assert "receipt_no" not in transition.changes
    assert transition.new_status == RequestStatus.PROCESSING


def test_approve_ready_request_moves_back_to_processing():
    transition = _request(RequestAction.APPROVE, status=RequestStatus.READY, receipt_no="OR-2026-1")

    assert transition.new_status == RequestStatus.PROCESSING


def test_reject_only_changes_status():
    transition = _request(RequestAction.REJECT, status=RequestStatus.READY)

    assert transition.changes == {"status": RequestStatus.REJECTED}


def test_hold_sets_hold_fields_and_keeps_status():
    until = NOW + timedelta(days=3)
    transition = _request(RequestAction.HOLD, reason="  missing ID  ", hold_until=until)

    assert transition.changes == {
        "is_on_hold": True,
        "hold_reason": "missing ID",
        "hold_until": until,
    }
    assert transition.new_status is None


def test_hold_with_blank_reason_stores_none():
    transition = _request(RequestAction.HOLD, reason="   ")

    assert transition.changes["hold_reason"] is None
    assert transition.changes["hold_until"] is None


def test_hold_with_past_expiry_is_still_a_hold():
    transition = _request(RequestAction.HOLD, hold_until=NOW - timedelta(days=1))

    assert transition.changes["is_on_hold"] is True


def test_hold_then_release_clears_everything():
    hold = _request(RequestAction.HOLD, reason="check", hold_until=NOW)
    release = _request(RequestAction.RELEASE)

    assert set(hold.changes) == set(release.changes)
    assert release.changes == {"is_on_hold": False, "hold_reason": None, "hold_until": None}


def test_verify_payment_moves_pending_to_processing():
    transition = _request(RequestAction.VERIFY_PAYMENT, reason="GCash ref ok")

    assert transition.changes == {
        "payment_verified_at": NOW,
        "payment_verification_note": "GCash ref ok",
        "status": RequestStatus.PROCESSING,
    }


@pytest.mark.parametrize(
    "status",
    [RequestStatus.PROCESSING, RequestStatus.READY, RequestStatus.REJECTED, RequestStatus.SUBMITTED],
)
def test_verify_payment_leaves_non_pending_status(status):
    transition = _request(RequestAction.VERIFY_PAYMENT, status=status)

    assert "status" not in transition.changes
    assert transition.changes["payment_verified_at"] == NOW


def test_mark_ready_sets_completion_time():
    transition = _request(RequestAction.MARK_READY, status=RequestStatus.PROCESSING)

    assert transition.changes == {"status": RequestStatus.READY, "completed_at": NOW}


def test_default_receipt_factory_uses_or_prefix():
    transition = apply_request_action(
        RequestAction.APPROVE,
        RequestState(status=RequestStatus.PENDING),
        ActionParams(now=NOW),
    )

    assert transition.changes["receipt_no"].startswith("OR-2026-")


# ============================================
# Student actions
# ============================================


def _student(action: StudentAction, **params):
    return apply_student_action(action, ActionParams(now=NOW, **params))


def test_student_approve_activates_and_clears_hold():
    transition = _student(StudentAction.APPROVE)

    assert transition.event == EventType.STUDENT_UPDATED
    assert transition.changes == {
        "status": StudentStatus.ACTIVE,
        "is_on_hold": False,
        "hold_reason": None,
        "hold_until": None,
    }


def test_student_reject():
    assert _student(StudentAction.REJECT).changes == {"status": StudentStatus.REJECTED}


def test_student_hold_forces_active():
    transition = _student(StudentAction.HOLD, reason="unpaid fees")

    assert transition.changes["status"] == StudentStatus.ACTIVE
    assert transition.changes["is_on_hold"] is True
    assert transition.changes["hold_reason"] == "unpaid fees"


def test_student_release_hold_keeps_status():
    transition = _student(StudentAction.RELEASE_HOLD)

    assert "status" not in transition.changes
    assert transition.changes["is_on_hold"] is False


def test_student_deactivate_and_reactivate():
    assert _student(StudentAction.DEACTIVATE).changes == {
        "is_deactivated": True,
        "deactivated_at": NOW,
    }
    assert _student(StudentAction.REACTIVATE).changes == {
        "is_deactivated": False,
        "deactivated_at": None,
    }


def test_naive_hold_until_is_treated_as_utc():
    transition = _student(StudentAction.HOLD, hold_until=datetime(2026, 4, 1, 8, 0))

    assert transition.changes["hold_until"] == datetime(2026, 4, 1, 8, 0, tzinfo=UTC)


# ============================================
# Student access
# ============================================


def _account(**overrides):
    fields = {
        "status": StudentStatus.ACTIVE,
        "is_deactivated": False,
        "is_on_hold": False,
        "hold_until": None,
        "identity_enrolled_at": NOW - timedelta(days=30),
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_active_enrolled_student_may_authenticate():
    decision = student_can_authenticate(_account(), now=NOW)

    assert decision.allowed is True
    assert decision.reason_code is None


@pytest.mark.parametrize(
    ("overrides", "reason_code"),
    [
        ({"status": StudentStatus.PENDING}, "ACCOUNT_PENDING_APPROVAL"),
        ({"status": StudentStatus.REJECTED}, "ACCOUNT_REJECTED"),
        ({"is_deactivated": True}, "ACCOUNT_DEACTIVATED"),
        ({"is_on_hold": True}, "ACCOUNT_ON_HOLD"),
        ({"is_on_hold": True, "hold_until": NOW + timedelta(hours=1)}, "ACCOUNT_ON_HOLD"),
        ({"identity_enrolled_at": None}, "IDENTITY_ENROLLMENT_REQUIRED"),
    ],
)
def test_access_denied_reasons(overrides, reason_code):
    decision = student_can_authenticate(_account(**overrides), now=NOW)

    assert decision.allowed is False
    assert decision.reason_code == reason_code


def test_expired_hold_does_not_block_access():
    account = _account(is_on_hold=True, hold_until=NOW - timedelta(minutes=1))

    assert student_can_authenticate(account, now=NOW).allowed is True


def test_first_failing_condition_is_reported():
    account = _account(status=StudentStatus.PENDING, is_deactivated=True, identity_enrolled_at=None)

    assert student_can_authenticate(account, now=NOW).reason_code == "ACCOUNT_PENDING_APPROVAL"

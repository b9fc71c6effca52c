"""
Status Engine

Pure transition rules for admin actions on document requests and student
accounts: given the current state, an action and the admin's parameters,
return the field changes to persist and the event to publish.

Design Principles:
- No I/O; never awaits
- Rules are explicit tables keyed by every action
- Admin-trusted leniency: any action is accepted from any prior state.
  Re-approving a ``ready`` request moves it back to ``processing``, and
  verify-payment is applied to ``ready``/``rejected`` requests too
- Hold expiry is not evaluated here; a hold with a past ``hold_until`` is
  still a hold. Expiry is only considered by ``student_can_authenticate``
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from registrar.core.events import EventType
from registrar.modules.document_requests.models import RequestStatus
from registrar.modules.status_engine.actions import RequestAction, StudentAction
from registrar.modules.status_engine.numbers import generate_receipt_no
from registrar.modules.students.models import StudentStatus

if TYPE_CHECKING:
    from registrar.modules.students.models import Student


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


@dataclass(frozen=True)
class ActionParams:
    """Admin-supplied input for an action."""

    reason: str | None = None
    hold_until: datetime | None = None
    now: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def clean_reason(self) -> str | None:
        """Trimmed reason; blank becomes None."""
        if self.reason is None:
            return None
        return self.reason.strip() or None


@dataclass(frozen=True)
class RequestState:
    """The persisted fields request rules depend on."""

    status: RequestStatus
    receipt_no: str | None = None


@dataclass(frozen=True)
class Transition:
    """Outcome of a rule: fields to write and the event to publish."""

    changes: dict[str, Any]
    event: EventType

    @property
    def new_status(self) -> Any:
        return self.changes.get("status")


ReceiptFactory = Callable[[datetime], str]
RequestRule = Callable[[RequestState, ActionParams, ReceiptFactory], dict[str, Any]]
StudentRule = Callable[[ActionParams], dict[str, Any]]

CLEARED_HOLD: dict[str, Any] = {
    "is_on_hold": False,
    "hold_reason": None,
    "hold_until": None,
}


def _hold_fields(params: ActionParams) -> dict[str, Any]:
    return {
        "is_on_hold": True,
        "hold_reason": params.clean_reason,
        "hold_until": as_utc(params.hold_until),
    }


# ============================================
# Document request rules
# ============================================


def _approve_request(
    state: RequestState, params: ActionParams, receipt_factory: ReceiptFactory
) -> dict[str, Any]:
    changes: dict[str, Any] = {
        "status": RequestStatus.PROCESSING,
        "payment_approved_at": params.now,
    }
    if not state.receipt_no:
        changes["receipt_no"] = receipt_factory(params.now)
    return changes


def _reject_request(
    state: RequestState, params: ActionParams, receipt_factory: ReceiptFactory
) -> dict[str, Any]:
    return {"status": RequestStatus.REJECTED}


def _hold_request(
    state: RequestState, params: ActionParams, receipt_factory: ReceiptFactory
) -> dict[str, Any]:
    return _hold_fields(params)


def _release_request(
    state: RequestState, params: ActionParams, receipt_factory: ReceiptFactory
) -> dict[str, Any]:
    return dict(CLEARED_HOLD)


def _verify_payment(
    state: RequestState, params: ActionParams, receipt_factory: ReceiptFactory
) -> dict[str, Any]:
    changes: dict[str, Any] = {
        "payment_verified_at": params.now,
        "payment_verification_note": params.clean_reason,
    }
    if state.status == RequestStatus.PENDING:
        changes["status"] = RequestStatus.PROCESSING
    return changes


def _mark_ready(
    state: RequestState, params: ActionParams, receipt_factory: ReceiptFactory
) -> dict[str, Any]:
    return {"status": RequestStatus.READY, "completed_at": params.now}


REQUEST_RULES: dict[RequestAction, RequestRule] = {
    RequestAction.APPROVE: _approve_request,
    RequestAction.REJECT: _reject_request,
    RequestAction.HOLD: _hold_request,
    RequestAction.RELEASE: _release_request,
    RequestAction.VERIFY_PAYMENT: _verify_payment,
    RequestAction.MARK_READY: _mark_ready,
}


def apply_request_action(
    action: RequestAction,
    state: RequestState,
    params: ActionParams | None = None,
    receipt_factory: ReceiptFactory = generate_receipt_no,
) -> Transition:
    """
    Compute the field changes for an admin action on a document request.

    Args:
        action: The admin action
        state: Current persisted status and receipt number
        params: Reason / hold expiry / clock
        receipt_factory: Builds a receipt number for a first approval

    Returns:
        Transition with the changes and ``request-updated``
    """
    params = params or ActionParams()
    changes = REQUEST_RULES[action](state, params, receipt_factory)
    return Transition(changes=changes, event=EventType.REQUEST_UPDATED)


# ============================================
# Student rules
# ============================================


def _approve_student(params: ActionParams) -> dict[str, Any]:
    return {"status": StudentStatus.ACTIVE, **CLEARED_HOLD}


def _reject_student(params: ActionParams) -> dict[str, Any]:
    return {"status": StudentStatus.REJECTED}


def _hold_student(params: ActionParams) -> dict[str, Any]:
    return {"status": StudentStatus.ACTIVE, **_hold_fields(params)}


def _release_student_hold(params: ActionParams) -> dict[str, Any]:
    return dict(CLEARED_HOLD)


def _deactivate_student(params: ActionParams) -> dict[str, Any]:
    return {"is_deactivated": True, "deactivated_at": params.now}


def _reactivate_student(params: ActionParams) -> dict[str, Any]:
    return {"is_deactivated": False, "deactivated_at": None}


STUDENT_RULES: dict[StudentAction, StudentRule] = {
    StudentAction.APPROVE: _approve_student,
    StudentAction.REJECT: _reject_student,
    StudentAction.HOLD: _hold_student,
    StudentAction.RELEASE_HOLD: _release_student_hold,
    StudentAction.DEACTIVATE: _deactivate_student,
    StudentAction.REACTIVATE: _reactivate_student,
}


def apply_student_action(
    action: StudentAction,
    params: ActionParams | None = None,
) -> Transition:
    """Compute the field changes for an admin action on a student account."""
    params = params or ActionParams()
    changes = STUDENT_RULES[action](params)
    return Transition(changes=changes, event=EventType.STUDENT_UPDATED)


# ============================================
# Student access
# ============================================


@dataclass(frozen=True)
class AccessDecision:
    """Whether a student may enter the student area, and why not."""

    allowed: bool
    reason_code: str | None = None
    message: str | None = None


ACCESS_GRANTED = AccessDecision(allowed=True)


def student_can_authenticate(student: "Student", now: datetime | None = None) -> AccessDecision:
    """
    Check the student access invariant.

    Active AND not deactivated AND (not on hold OR hold expired) AND identity
    enrollment completed. The first failing condition is reported.
    """
    now = now or datetime.now(UTC)

    if student.status == StudentStatus.PENDING:
        return AccessDecision(
            False,
            "ACCOUNT_PENDING_APPROVAL",
            "Your account is pending approval. Please wait for admin activation.",
        )
    if student.status != StudentStatus.ACTIVE:
        return AccessDecision(False, "ACCOUNT_REJECTED", "Your registration was not approved.")
    if student.is_deactivated:
        return AccessDecision(False, "ACCOUNT_DEACTIVATED", "Your account has been deactivated.")
    if student.is_on_hold:
        hold_until = as_utc(student.hold_until)
        if hold_until is None or hold_until > now:
            return AccessDecision(False, "ACCOUNT_ON_HOLD", "Your account is on hold.")
    if student.identity_enrolled_at is None:
        return AccessDecision(
            False,
            "IDENTITY_ENROLLMENT_REQUIRED",
            "Identity enrollment is required before login.",
        )
    return ACCESS_GRANTED

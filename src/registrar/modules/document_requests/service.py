"""
Document Request Service Layer

Business logic for document requests.

This module implements:
1. Student submission: one pending request per document line, each with a
   fresh reference number, then ``request-created`` per row
2. Student dashboard: the student's requests plus counters
3. Admin actions: Status Engine transition, audited, then
   ``request-updated``
4. Admin listing and overview counters

Ordering for every write: persist -> audit -> commit -> publish. Nothing is
published when the write fails.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser
from registrar.core.events import EventBroker, EventType
from registrar.modules.document_requests import repository
from registrar.modules.document_requests.models import (
    DocumentRequest,
    DocumentType,
    RequestStatus,
)
from registrar.modules.document_requests.schemas import CreateRequestsBody
from registrar.modules.shared.actions import (
    ActionOutcome,
    actor_from_admin,
    iso_or_none,
    persist_with_audit,
)
from registrar.modules.shared.errors import NotFoundError, PersistenceError, ValidationError
from registrar.modules.shared.schemas import ActionRequest
from registrar.modules.status_engine import (
    ActionParams,
    RequestState,
    apply_request_action,
    generate_reference_no,
    parse_request_action,
    resolve_document_type,
)
from registrar.modules.students import repository as student_repository
from registrar.modules.students.models import StudentStatus

logger = logging.getLogger(__name__)

RECENT_REQUESTS_LIMIT = 5


@dataclass
class StudentDashboard:
    requests: list[DocumentRequest]
    pending: int
    ready: int
    submitted: int
    total: int


@dataclass
class AdminOverview:
    pending_requests: int
    processing_today: int
    submitted_today: int
    pending_students: int
    recent_requests: list[DocumentRequest]


def _start_of_day(now: datetime) -> datetime:
    return now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def parse_status_filter(value: str | None) -> RequestStatus | None:
    if value is None or not value.strip():
        return None
    try:
        return RequestStatus(value.strip().lower())
    except ValueError as e:
        allowed = ", ".join(s.value for s in RequestStatus)
        raise ValidationError(f"Unknown request status '{value}'. Allowed: {allowed}") from e


def _default_payment_reference(payment_method: str | None, now: datetime) -> str | None:
    """``PAY-<epoch ms>`` when a payment method was chosen without a reference."""
    if not payment_method:
        return None
    return f"PAY-{int(now.timestamp() * 1000)}"


# ============================================
# Student endpoints
# ============================================


async def create_requests(
    db: AsyncSession,
    broker: EventBroker,
    data: CreateRequestsBody,
    now: datetime | None = None,
) -> list[DocumentRequest]:
    """
    Create one pending request per document line.

    Every line is validated before anything is written; the rows are then
    inserted in a single transaction.

    Raises:
        ValidationError: Missing student number, no documents, unknown code
        NotFoundError: No student with that number
        PersistenceError: The insert failed (e.g. a reference number clash)
    """
    now = now or datetime.now(UTC)
    student_no = (data.student_no or "").strip()

    if not student_no:
        raise ValidationError("Student number is required.")
    if not data.documents:
        raise ValidationError("At least one document is required.")

    resolved: list[tuple[DocumentType, int, Decimal]] = []
    for line in data.documents:
        document_type = resolve_document_type(line.id)
        if document_type is None:
            raise ValidationError(f"Unsupported document type: {line.id}")
        resolved.append((document_type, line.copies, line.price))

    try:
        student = await student_repository.get_by_student_no(db, student_no)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load student {student_no}: {e}")
        raise PersistenceError() from e

    if student is None:
        raise NotFoundError("student", student_no)

    payment_reference = (data.payment_reference or "").strip() or _default_payment_reference(
        data.payment_method, now
    )

    rows = [
        DocumentRequest(
            student_id=student.id,
            type=document_type,
            status=RequestStatus.PENDING,
            reference_no=generate_reference_no(document_type, now),
            copies=copies,
            purpose=data.purpose,
            delivery_method=data.delivery_method,
            payment_method=data.payment_method,
            payment_reference=payment_reference,
            total_amount=price * copies,
            is_on_hold=False,
            requested_at=now,
        )
        for document_type, copies, price in resolved
    ]

    try:
        created = await repository.create_many(db, rows)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to create requests for {student_no}: {e}")
        raise PersistenceError("Failed to submit request.") from e

    for row in created:
        broker.publish(
            EventType.REQUEST_CREATED,
            {"studentNo": student_no, "requestId": str(row.id)},
        )

    logger.info(
        f"Student {student_no} submitted {len(created)} request(s): "
        f"{', '.join(row.reference_no for row in created)}"
    )
    return created


async def get_student_dashboard(
    db: AsyncSession,
    student_no: str | None,
    reference_no: str | None = None,
) -> StudentDashboard:
    """
    A student's requests (newest first) plus counters.

    The counters always cover all of the student's requests, even when
    ``reference_no`` narrows the list.

    Raises:
        ValidationError: Missing student number
        NotFoundError: No student with that number
    """
    student_no = (student_no or "").strip()
    if not student_no:
        raise ValidationError("Student number is required.")

    try:
        student = await student_repository.get_by_student_no(db, student_no)
        if student is None:
            raise NotFoundError("student", student_no)

        requests = await repository.list_for_student(
            db, student.id, (reference_no or "").strip() or None
        )
        counts = await repository.count_by_status_for_student(db, student.id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load dashboard for {student_no}: {e}")
        raise PersistenceError("Failed to load requests.") from e

    return StudentDashboard(
        requests=requests,
        pending=counts[RequestStatus.PENDING] + counts[RequestStatus.PROCESSING],
        ready=counts[RequestStatus.READY],
        submitted=counts[RequestStatus.SUBMITTED],
        total=sum(counts.values()),
    )


# ============================================
# Admin endpoints
# ============================================


async def admin_update_request(
    db: AsyncSession,
    broker: EventBroker,
    request_id: UUID,
    data: ActionRequest,
    admin: AdminUser | None = None,
) -> ActionOutcome[DocumentRequest]:
    """
    Apply an admin action to a document request.

    Args:
        db: Database session
        broker: Event broker for the post-commit notification
        request_id: Request to change
        data: Action name, reason and hold expiry
        admin: Acting admin (recorded in the audit entry)

    Returns:
        ActionOutcome with the updated request

    Raises:
        InvalidActionError: Missing or unknown action (nothing written)
        NotFoundError: Request does not exist
        PersistenceError: The change could not be written
    """
    action = parse_request_action(data.action)

    try:
        request = await repository.get_by_id(db, request_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load request {request_id}: {e}")
        raise PersistenceError() from e

    if request is None:
        raise NotFoundError("request", request_id)

    student_no = request.student.student_no if request.student is not None else None

    params = ActionParams(reason=data.reason, hold_until=data.hold_until)
    transition = apply_request_action(
        action,
        RequestState(status=request.status, receipt_no=request.receipt_no),
        params,
    )

    outcome = await persist_with_audit(
        db,
        request,
        transition.changes,
        actor=actor_from_admin(admin),
        action=action.value,
        entity_type="request",
        reason=params.clean_reason,
        metadata={
            "referenceNo": request.reference_no,
            "holdUntil": iso_or_none(params.hold_until),
        },
    )

    if student_no:
        outcome.delivered = broker.publish(
            transition.event,
            {
                "studentNo": student_no,
                "requestId": str(request.id),
                "status": request.status.value,
            },
        )

    logger.info(
        f"Request {request.reference_no} {action.value} -> {request.status.value} "
        f"by {admin.email if admin else 'unknown'}"
    )
    return outcome


async def admin_list_requests(
    db: AsyncSession,
    status: str | None = None,
    needs_verification: bool = False,
    request_id: UUID | None = None,
) -> list[DocumentRequest]:
    """
    List requests for the admin console, newest first.

    Raises:
        ValidationError: Unknown status filter
    """
    status_filter = parse_status_filter(status)
    try:
        return await repository.list_for_admin(
            db,
            status=status_filter,
            needs_verification=needs_verification,
            request_id=request_id,
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to list requests: {e}")
        raise PersistenceError("Failed to load requests.") from e


async def admin_get_overview(db: AsyncSession, now: datetime | None = None) -> AdminOverview:
    """
    Dashboard counters. "Today" starts at UTC midnight and is matched
    against ``requested_at``.
    """
    today = _start_of_day(now or datetime.now(UTC))
    try:
        return AdminOverview(
            pending_requests=await repository.count_by_status(db, RequestStatus.PENDING),
            processing_today=await repository.count_by_status(
                db, RequestStatus.PROCESSING, requested_since=today
            ),
            submitted_today=await repository.count_by_status(
                db, RequestStatus.SUBMITTED, requested_since=today
            ),
            pending_students=await student_repository.count_by_status(db, StudentStatus.PENDING),
            recent_requests=await repository.list_recent(db, RECENT_REQUESTS_LIMIT),
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to load overview: {e}")
        raise PersistenceError("Failed to load overview.") from e

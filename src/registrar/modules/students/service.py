"""
Student Service Layer

Admin actions on student accounts:
- Parse the action (400 on unknown), load the student (404)
- Compute the change with the Status Engine
- Persist the change and its audit entry in one transaction
- Publish ``student-updated`` after commit

Also the student's own profile read and edit.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.auth import AdminUser
from registrar.core.events import EventBroker
from registrar.modules.auth.service import is_valid_email
from registrar.modules.shared.actions import (
    ActionOutcome,
    actor_from_admin,
    iso_or_none,
    persist_with_audit,
)
from registrar.modules.shared.errors import (
    NotFoundError,
    PersistenceError,
    ServiceError,
    ValidationError,
)
from registrar.modules.shared.schemas import ActionRequest
from registrar.modules.status_engine import (
    ActionParams,
    apply_student_action,
    parse_student_action,
)
from registrar.modules.students import repository
from registrar.modules.students.models import Student, StudentStatus
from registrar.modules.students.schemas import ProfileUpdateRequest

logger = logging.getLogger(__name__)


class DuplicateEmailError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Email is already used by another account.",
            error_code="DUPLICATE_EMAIL",
            status_code=409,
        )


def parse_status_filter(value: str | None) -> StudentStatus | None:
    """Accept 'Pending', 'pending', 'ACTIVE', ... ; blank means no filter."""
    if value is None or not value.strip():
        return None
    normalized = value.strip().lower()
    for status in StudentStatus:
        if status.value.lower() == normalized:
            return status
    allowed = ", ".join(s.value for s in StudentStatus)
    raise ValidationError(f"Unknown student status '{value}'. Allowed: {allowed}")


async def admin_update_student(
    db: AsyncSession,
    broker: EventBroker,
    student_id: UUID,
    data: ActionRequest,
    admin: AdminUser | None = None,
) -> ActionOutcome[Student]:
    """
    Apply an admin action to a student account.

    Args:
        db: Database session
        broker: Event broker for the post-commit notification
        student_id: Student to change
        data: Action name, reason and hold expiry
        admin: Acting admin (recorded in the audit entry)

    Returns:
        ActionOutcome with the updated student

    Raises:
        InvalidActionError: Missing or unknown action (nothing written)
        NotFoundError: Student does not exist
        PersistenceError: The change could not be written
    """
    action = parse_student_action(data.action)

    try:
        student = await repository.get_by_id(db, student_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load student {student_id}: {e}")
        raise PersistenceError() from e

    if student is None:
        raise NotFoundError("student", student_id)

    params = ActionParams(reason=data.reason, hold_until=data.hold_until)
    transition = apply_student_action(action, params)

    outcome = await persist_with_audit(
        db,
        student,
        transition.changes,
        actor=actor_from_admin(admin),
        action=action.value,
        entity_type="student",
        reason=params.clean_reason,
        metadata={
            "studentNo": student.student_no,
            "holdUntil": iso_or_none(params.hold_until),
        },
    )

    outcome.delivered = broker.publish(
        transition.event,
        {"studentNo": student.student_no, "status": student.status.value},
    )

    logger.info(
        f"Student {student.student_no} {action.value} -> {student.status.value} "
        f"by {admin.email if admin else 'unknown'}"
    )
    return outcome


async def admin_list_students(
    db: AsyncSession,
    status: str | None = None,
    on_hold: bool | None = None,
    deactivated: bool | None = None,
) -> list[Student]:
    """
    List students for the admin console, newest first.

    Raises:
        ValidationError: Unknown status filter
        PersistenceError: The query failed
    """
    status_filter = parse_status_filter(status)
    try:
        return await repository.list_for_admin(
            db, status=status_filter, on_hold=on_hold, deactivated=deactivated
        )
    except SQLAlchemyError as e:
        logger.error(f"Failed to list students: {e}")
        raise PersistenceError("Failed to load students.") from e


# ============================================
# Student profile
# ============================================

_REQUIRED_PROFILE_FIELDS = ("first_name", "last_name", "email")
_OPTIONAL_PROFILE_FIELDS = ("phone", "address", "course", "year_level")


def _require_student_no(value: str | None) -> str:
    student_no = (value or "").strip()
    if not student_no:
        raise ValidationError("Student number is required.")
    return student_no


def profile_changes(data: ProfileUpdateRequest) -> dict[str, str | None]:
    """
    Collect the submitted profile fields, trimmed.

    Omitted fields are skipped. Names and email may not be blanked; blank
    contact and enrollment fields are cleared.
    """
    changes: dict[str, str | None] = {}

    for field in _REQUIRED_PROFILE_FIELDS:
        value = getattr(data, field)
        if value is None:
            continue
        value = value.strip()
        if not value:
            label = field.replace("_", " ").capitalize()
            raise ValidationError(f"{label} cannot be blank.")
        changes[field] = value

    for field in _OPTIONAL_PROFILE_FIELDS:
        value = getattr(data, field)
        if value is None:
            continue
        changes[field] = value.strip() or None

    if "email" in changes:
        email = changes["email"].lower()
        if not is_valid_email(email):
            raise ValidationError("A valid email is required.")
        changes["email"] = email

    return changes


async def get_profile(db: AsyncSession, student_no: str | None) -> Student:
    """
    Load a student's profile by student number.

    Raises:
        ValidationError: Missing student number
        NotFoundError: No student with that number
        PersistenceError: The query failed
    """
    student_no = _require_student_no(student_no)
    try:
        student = await repository.get_by_student_no(db, student_no)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load profile for {student_no}: {e}")
        raise PersistenceError("Failed to load profile.") from e

    if student is None:
        raise NotFoundError("student", student_no)
    return student


async def update_profile(db: AsyncSession, data: ProfileUpdateRequest) -> Student:
    """
    Apply a student's own profile edits.

    Raises:
        ValidationError: Missing student number, blank name or invalid email
        NotFoundError: No student with that number
        DuplicateEmailError: Another account already uses the new email
        PersistenceError: The change could not be written
    """
    student_no = _require_student_no(data.student_no)
    changes = profile_changes(data)
    student = await get_profile(db, student_no)

    try:
        new_email = changes.get("email")
        if new_email is not None and new_email != student.email:
            owner = await repository.get_by_email(db, new_email)
            if owner is not None and owner.id != student.id:
                raise DuplicateEmailError()

        for field, value in changes.items():
            setattr(student, field, value)
        await db.commit()
        await db.refresh(student)
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateEmailError() from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to update profile for {student_no}: {e}")
        raise PersistenceError("Failed to update profile.") from e

    logger.info(f"Profile updated for {student_no}: {', '.join(sorted(changes)) or 'no changes'}")
    return student

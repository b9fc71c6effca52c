"""
Tests for admin actions on student accounts.

Also the student's own profile read and edit.
"""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from registrar.modules.shared.errors import (
    AuditWriteError,
    InvalidActionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from registrar.modules.shared.schemas import ActionRequest
from registrar.modules.students.models import Student, StudentStatus
from registrar.modules.students.schemas import ProfileUpdateRequest
from registrar.modules.students.service import (
    DuplicateEmailError,
    admin_list_students,
    admin_update_student,
    get_profile,
    parse_status_filter,
    profile_changes,
    update_profile,
)

SERVICE = "registrar.modules.students.service"
AUDIT = "registrar.modules.shared.actions.audit_service"


@pytest.fixture
def pending_student():
    student = MagicMock(spec=Student)
    student.id = uuid4()
    student.student_no = "2022-04567"
    student.email = "juan.delacruz@hau.edu.ph"
    student.status = StudentStatus.PENDING
    student.is_on_hold = False
    student.hold_reason = None
    student.hold_until = None
    student.is_deactivated = False
    student.deactivated_at = None
    return student


def _payloads(broker):
    return [json.loads(frame.split("\n")[1].removeprefix("data: ")) for frame in broker.frames]


# ============================================
# Test parse_status_filter
# ============================================


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Pending", StudentStatus.PENDING),
        ("active", StudentStatus.ACTIVE),
        (" REJECTED ", StudentStatus.REJECTED),
        (None, None),
        ("", None),
    ],
)
def test_parse_status_filter(value, expected):
    assert parse_status_filter(value) == expected


def test_parse_status_filter_unknown():
    with pytest.raises(ValidationError) as exc_info:
        parse_status_filter("graduated")

    assert "graduated" in exc_info.value.message


# ============================================
# Test admin_update_student
# ============================================


@pytest.mark.asyncio
async def test_approve_activates_and_publishes(mock_db, broker, admin, pending_student):
    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(AUDIT) as mock_audit,
    ):
        mock_repo.get_by_id = AsyncMock(return_value=pending_student)
        mock_audit.record = AsyncMock(return_value=MagicMock())

        outcome = await admin_update_student(
            mock_db, broker, pending_student.id, ActionRequest(action="approve"), admin
        )

    assert pending_student.status == StudentStatus.ACTIVE
    assert pending_student.is_on_hold is False
    assert outcome.audit_recorded is True
    mock_db.commit.assert_awaited_once()

    audit_kwargs = mock_audit.record.await_args.kwargs
    assert audit_kwargs["entity_type"] == "student"
    assert audit_kwargs["action"] == "approve"
    assert audit_kwargs["metadata"] == {"studentNo": "2022-04567", "holdUntil": None}

    assert _payloads(broker) == [{"studentNo": "2022-04567", "status": "Active"}]
    assert broker.frames[0].startswith("event: student-updated\n")


@pytest.mark.asyncio
async def test_hold_forces_active_with_reason(mock_db, broker, admin, pending_student):
    hold_until = datetime(2026, 6, 1, tzinfo=UTC)

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(AUDIT) as mock_audit,
    ):
        mock_repo.get_by_id = AsyncMock(return_value=pending_student)
        mock_audit.record = AsyncMock(return_value=MagicMock())

        await admin_update_student(
            mock_db,
            broker,
            pending_student.id,
            ActionRequest(action="hold", reason="Unpaid balance", hold_until=hold_until),
            admin,
        )

    assert pending_student.status == StudentStatus.ACTIVE
    assert pending_student.is_on_hold is True
    assert pending_student.hold_reason == "Unpaid balance"
    assert pending_student.hold_until == hold_until
    assert mock_audit.record.await_args.kwargs["reason"] == "Unpaid balance"


@pytest.mark.asyncio
async def test_deactivate_then_reactivate(mock_db, broker, admin, pending_student):
    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(AUDIT) as mock_audit,
    ):
        mock_repo.get_by_id = AsyncMock(return_value=pending_student)
        mock_audit.record = AsyncMock(return_value=MagicMock())

        await admin_update_student(
            mock_db, broker, pending_student.id, ActionRequest(action="deactivate"), admin
        )
        assert pending_student.is_deactivated is True
        assert pending_student.deactivated_at is not None

        await admin_update_student(
            mock_db, broker, pending_student.id, ActionRequest(action="reactivate"), admin
        )

    assert pending_student.is_deactivated is False
    assert pending_student.deactivated_at is None
    assert len(broker.frames) == 2


@pytest.mark.asyncio
async def test_request_only_action_is_invalid_for_students(mock_db, broker, admin):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_id = AsyncMock()

        with pytest.raises(InvalidActionError) as exc_info:
            await admin_update_student(
                mock_db, broker, uuid4(), ActionRequest(action="mark-ready"), admin
            )

    assert exc_info.value.error_code == "INVALID_ACTION"
    mock_repo.get_by_id.assert_not_awaited()
    assert broker.frames == []


@pytest.mark.asyncio
async def test_unknown_student(mock_db, broker, admin):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError) as exc_info:
            await admin_update_student(
                mock_db, broker, uuid4(), ActionRequest(action="approve"), admin
            )

    assert exc_info.value.error_code == "STUDENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_audit_failure_is_reported_as_warning(mock_db, broker, admin, pending_student):
    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(AUDIT) as mock_audit,
    ):
        mock_repo.get_by_id = AsyncMock(return_value=pending_student)
        mock_audit.record = AsyncMock(side_effect=AuditWriteError())

        outcome = await admin_update_student(
            mock_db, broker, pending_student.id, ActionRequest(action="reject"), admin
        )

    assert pending_student.status == StudentStatus.REJECTED
    assert outcome.audit_recorded is False
    assert outcome.warning.error == "AUDIT_WRITE_FAILED"
    mock_db.commit.assert_awaited_once()
    assert len(broker.frames) == 1


@pytest.mark.asyncio
async def test_flush_failure_publishes_nothing(mock_db, broker, admin, pending_student):
    mock_db.flush = AsyncMock(side_effect=OperationalError("UPDATE students", {}, Exception("down")))

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(AUDIT) as mock_audit,
    ):
        mock_repo.get_by_id = AsyncMock(return_value=pending_student)
        mock_audit.record = AsyncMock()

        with pytest.raises(PersistenceError):
            await admin_update_student(
                mock_db, broker, pending_student.id, ActionRequest(action="approve"), admin
            )

    mock_audit.record.assert_not_awaited()
    mock_db.rollback.assert_awaited_once()
    mock_db.commit.assert_not_awaited()
    assert broker.frames == []


# ============================================
# Test admin_list_students
# ============================================


@pytest.mark.asyncio
async def test_admin_list_students_filters(mock_db, pending_student):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.list_for_admin = AsyncMock(return_value=[pending_student])

        students = await admin_list_students(mock_db, status="pending", on_hold=False)

    assert students == [pending_student]
    mock_repo.list_for_admin.assert_awaited_once_with(
        mock_db, status=StudentStatus.PENDING, on_hold=False, deactivated=None
    )


# ============================================
# Test student profile
# ============================================


@pytest.fixture
def profile_student(pending_student):
    pending_student.first_name = "Juan"
    pending_student.last_name = "Dela Cruz"
    pending_student.phone = "0917 555 0101"
    pending_student.address = "Angeles City"
    pending_student.course = "BS Nursing"
    pending_student.year_level = "3rd Year"
    return pending_student


def test_profile_changes_skips_omitted_fields():
    changes = profile_changes(
        ProfileUpdateRequest(student_no="2022-04567", first_name="  Juanito ")
    )

    assert changes == {"first_name": "Juanito"}


def test_profile_changes_clears_blank_optional_fields():
    changes = profile_changes(
        ProfileUpdateRequest(student_no="2022-04567", phone="  ", course=" BS Biology ")
    )

    assert changes == {"phone": None, "course": "BS Biology"}


def test_profile_changes_rejects_blank_name():
    with pytest.raises(ValidationError) as exc_info:
        profile_changes(ProfileUpdateRequest(student_no="2022-04567", last_name=" "))

    assert exc_info.value.message == "Last name cannot be blank."


def test_profile_changes_rejects_invalid_email():
    with pytest.raises(ValidationError):
        profile_changes(ProfileUpdateRequest(student_no="2022-04567", email="juan@"))


@pytest.mark.asyncio
async def test_get_profile(mock_db, profile_student):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=profile_student)

        student = await get_profile(mock_db, " 2022-04567 ")

    assert student is profile_student
    mock_repo.get_by_student_no.assert_awaited_once_with(mock_db, "2022-04567")


@pytest.mark.asyncio
async def test_get_profile_requires_student_no(mock_db):
    with pytest.raises(ValidationError) as exc_info:
        await get_profile(mock_db, "   ")

    assert exc_info.value.message == "Student number is required."


@pytest.mark.asyncio
async def test_get_profile_unknown_student(mock_db):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError) as exc_info:
            await get_profile(mock_db, "1999-00001")

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_update_profile_applies_trimmed_fields(mock_db, profile_student):
    data = ProfileUpdateRequest(
        student_no="2022-04567",
        email=" Juan.DelaCruz@Gmail.com ",
        address=" Mabalacat, Pampanga ",
    )

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=profile_student)
        mock_repo.get_by_email = AsyncMock(return_value=None)

        student = await update_profile(mock_db, data)

    assert student.email == "juan.delacruz@gmail.com"
    assert student.address == "Mabalacat, Pampanga"
    # Untouched fields keep their values
    assert student.first_name == "Juan"
    assert student.phone == "0917 555 0101"
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_profile_email_taken(mock_db, profile_student):
    other = MagicMock(spec=Student)
    other.id = uuid4()

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=profile_student)
        mock_repo.get_by_email = AsyncMock(return_value=other)

        with pytest.raises(DuplicateEmailError) as exc_info:
            await update_profile(
                mock_db,
                ProfileUpdateRequest(student_no="2022-04567", email="taken@hau.edu.ph"),
            )

    assert exc_info.value.status_code == 409
    assert profile_student.email == "juan.delacruz@hau.edu.ph"
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_profile_commit_failure(mock_db, profile_student):
    mock_db.commit.side_effect = OperationalError("UPDATE students", {}, Exception("down"))
    # Rollback expires loaded attributes
    mock_db.rollback.side_effect = lambda: delattr(profile_student, "student_no")

    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_student_no = AsyncMock(return_value=profile_student)

        with pytest.raises(PersistenceError) as exc_info:
            await update_profile(
                mock_db, ProfileUpdateRequest(student_no="2022-04567", course="BS Biology")
            )

    assert exc_info.value.message == "Failed to update profile."
    mock_db.rollback.assert_awaited_once()

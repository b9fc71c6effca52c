"""
Accounts & Auth Service Layer

Student registration and login, identity enrollment, admin login and the
password reset flow.

Security considerations:
- Passwords are bcrypt hashed; reset tokens are SHA-256 hashed before storage
- Reset tokens are 32 random bytes (hex), valid for 30 minutes, single use
- Repeated reset requests inside the cooldown succeed without sending again
- Neither passwords nor tokens are logged
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config import settings
from registrar.core.email import send_password_reset
from registrar.core.events import EventBroker, EventType
from registrar.core.security import (
    create_access_token,
    create_refresh_token,
    hash_password,
    verify_password,
)
from registrar.modules.admins import Admin, AdminRepository
from registrar.modules.auth import repository
from registrar.modules.auth.schemas import (
    ForgotPasswordRequest,
    IdentityEnrollmentRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from registrar.modules.shared.errors import (
    NotFoundError,
    PersistenceError,
    ServiceError,
    ValidationError,
)
from registrar.modules.status_engine import student_can_authenticate
from registrar.modules.status_engine.engine import as_utc
from registrar.modules.students import repository as student_repository
from registrar.modules.students.models import Student, StudentStatus

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4

_email_adapter = TypeAdapter(EmailStr)


# ============================================
# Errors
# ============================================


class DuplicateStudentError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Student number or email already exists.",
            error_code="DUPLICATE_STUDENT",
            status_code=409,
        )


class InvalidCredentialsError(ServiceError):
    def __init__(self):
        super().__init__(
            message="Invalid email or password.",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


class AccountAccessDeniedError(ServiceError):
    """Student credentials are valid but the account may not sign in."""

    def __init__(self, reason_code: str, message: str):
        super().__init__(message=message, error_code=reason_code, status_code=403)


class InvalidResetTokenError(ServiceError):
    def __init__(self, message: str = "This reset link is invalid or has been used."):
        super().__init__(message=message, error_code="INVALID_RESET_TOKEN", status_code=400)


class ResetTokenExpiredError(ServiceError):
    def __init__(self):
        super().__init__(
            message="This reset link has expired.",
            error_code="RESET_TOKEN_EXPIRED",
            status_code=400,
        )


class EmailDeliveryError(ServiceError):
    def __init__(self):
        super().__init__(
            message="The reset email could not be sent. Please try again later.",
            error_code="EMAIL_DELIVERY_FAILED",
            status_code=502,
        )


# ============================================
# Helpers
# ============================================


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass
class ForgotPasswordResult:
    sent: bool
    message: str


def _clean(value: str | None) -> str:
    return (value or "").strip()


def is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _issue_tokens(subject: str, claims: dict[str, Any]) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(subject=subject, additional_claims=claims),
        refresh_token=create_refresh_token(subject=subject),
    )


# ============================================
# Student accounts
# ============================================


async def register_student(
    db: AsyncSession,
    broker: EventBroker,
    data: RegisterRequest,
) -> Student:
    """
    Create a Pending student account and publish ``student-created``.

    Raises:
        ValidationError: A required field is missing or the email is invalid
        DuplicateStudentError: Student number or email already registered
    """
    student_no = _clean(data.student_no)
    first_name = _clean(data.first_name)
    last_name = _clean(data.last_name)
    email = _clean(data.email).lower()
    password = _clean(data.password)

    if not all((student_no, first_name, last_name, email, password)):
        raise ValidationError("Please fill in all required fields.")
    if not is_valid_email(email):
        raise ValidationError("A valid email is required.")

    try:
        if await student_repository.find_conflicting(db, student_no, email) is not None:
            raise DuplicateStudentError()

        student = await student_repository.create(
            db,
            Student(
                student_no=student_no,
                first_name=first_name,
                last_name=last_name,
                email=email,
                password_hash=hash_password(password),
                course=_clean(data.course) or None,
                year_level=_clean(data.year_level) or None,
                status=StudentStatus.PENDING,
                is_on_hold=False,
                is_deactivated=False,
            ),
        )
    except IntegrityError as e:
        # Lost a race with a concurrent registration
        await db.rollback()
        raise DuplicateStudentError() from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to register student {student_no}: {e}")
        raise PersistenceError("Failed to register account.") from e

    broker.publish(
        EventType.STUDENT_CREATED,
        {"studentNo": student.student_no, "status": student.status.value},
    )
    logger.info(f"Student registered: {student.student_no}")
    return student


async def login_student(db: AsyncSession, data: LoginRequest) -> tuple[Student, TokenPair]:
    """
    Authenticate a student.

    Raises:
        ValidationError: Missing email or password
        InvalidCredentialsError: Unknown email or wrong password
        AccountAccessDeniedError: Account not allowed to sign in (reason code
            from the access check)
        PersistenceError: The account lookup failed
    """
    email = _clean(data.email).lower()
    password = _clean(data.password)
    if not email or not password:
        raise ValidationError("Email and password are required.")

    try:
        student = await student_repository.get_by_email(db, email)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load student account for login: {e}")
        raise PersistenceError() from e

    if student is None or not verify_password(password, student.password_hash):
        logger.warning("Failed student login attempt")
        raise InvalidCredentialsError()

    decision = student_can_authenticate(student)
    if not decision.allowed:
        logger.info(f"Student {student.student_no} denied: {decision.reason_code}")
        raise AccountAccessDeniedError(decision.reason_code, decision.message)

    tokens = _issue_tokens(
        str(student.id),
        {"role": "student", "email": student.email, "studentNo": student.student_no},
    )
    logger.info(f"Student logged in: {student.student_no}")
    return student, tokens


async def complete_identity_enrollment(
    db: AsyncSession,
    data: IdentityEnrollmentRequest,
) -> Student:
    """
    Mark the student's identity as verified. Repeating it keeps the first
    enrollment time.

    Raises:
        ValidationError: Missing student number or ``verified`` is false
        NotFoundError: No student with that number
    """
    student_no = _clean(data.student_no)
    if not student_no:
        raise ValidationError("Student number is required.")
    if not data.verified:
        raise ValidationError("Identity verification did not succeed.")

    try:
        student = await student_repository.get_by_student_no(db, student_no)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load student {student_no}: {e}")
        raise PersistenceError() from e

    if student is None:
        raise NotFoundError("student", student_no)

    if student.identity_enrolled_at is None:
        student.identity_enrolled_at = datetime.now(UTC)
        try:
            await db.commit()
            await db.refresh(student)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to save identity enrollment for {student_no}: {e}")
            raise PersistenceError() from e
        logger.info(f"Identity enrollment completed for {student_no}")

    return student


# ============================================
# Admin accounts
# ============================================


async def login_admin(db: AsyncSession, data: LoginRequest) -> tuple[Admin, TokenPair]:
    """
    Authenticate a registrar admin and record the login time.

    Raises:
        ValidationError: Missing email or password
        InvalidCredentialsError: Unknown email or wrong password
        PersistenceError: The account lookup failed
    """
    email = _clean(data.email).lower()
    password = _clean(data.password)
    if not email or not password:
        raise ValidationError("Email and password are required.")

    try:
        admin = await AdminRepository.get_by_email(db, email)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load admin account for login: {e}")
        raise PersistenceError() from e

    if admin is None or not verify_password(password, admin.password_hash):
        logger.warning("Failed admin login attempt")
        raise InvalidCredentialsError()

    try:
        admin = await AdminRepository.mark_logged_in(db, admin)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to record admin login for {email}: {e}")
        raise PersistenceError() from e

    tokens = _issue_tokens(
        str(admin.id),
        {"role": admin.role.value, "email": admin.email, "name": admin.full_name},
    )
    logger.info(f"Admin logged in: {admin.email} (role: {admin.role.value})")
    return admin, tokens


# ============================================
# Password reset
# ============================================


async def request_password_reset(
    db: AsyncSession,
    data: ForgotPasswordRequest,
    ip: str | None = None,
    user_agent: str | None = None,
    now: datetime | None = None,
) -> ForgotPasswordResult:
    """
    Email a password reset link.

    Raises:
        ValidationError: Missing or invalid email
        NotFoundError: No student with that email
        EmailDeliveryError: The email provider rejected the message
        PersistenceError: The database could not be reached
    """
    now = now or datetime.now(UTC)
    email = _clean(data.email).lower()
    if not email or not is_valid_email(email):
        raise ValidationError("A valid email is required.")

    try:
        student = await student_repository.get_by_email(db, email)
        if student is None:
            raise ServiceError("Email not found.", "EMAIL_NOT_FOUND", 404)
        latest = await repository.get_latest_for_student(db, student.id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load password reset state: {e}")
        raise PersistenceError("Failed to request password reset.") from e

    # Read before any rollback expires the instance
    student_no = student.student_no
    student_email = student.email
    student_name = student.full_name

    cooldown = timedelta(seconds=settings.password_reset_cooldown_seconds)
    if latest is not None and now - as_utc(latest.created_at) < cooldown:
        logger.info(f"Password reset for student {student_no} skipped (cooldown)")
        return ForgotPasswordResult(
            sent=False,
            message="Reset link already sent. Please wait before retrying.",
        )

    token = secrets.token_hex(32)
    try:
        await repository.create(
            db,
            student_id=student.id,
            token_hash=hash_reset_token(token),
            expires_at=now + timedelta(minutes=settings.password_reset_token_minutes),
            created_at=now,
            ip=ip,
            user_agent=user_agent,
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to store reset token for {student_no}: {e}")
        raise PersistenceError("Failed to request password reset.") from e

    if not await send_password_reset(student_email, student_name, token):
        raise EmailDeliveryError()

    logger.info(f"Password reset link sent for student {student_no}")
    return ForgotPasswordResult(
        sent=True,
        message="If an account exists, a reset link has been sent.",
    )


async def reset_password(
    db: AsyncSession,
    data: ResetPasswordRequest,
    now: datetime | None = None,
) -> None:
    """
    Set a new password using a reset token. The password change and the
    token's ``used_at`` commit together.

    Raises:
        ValidationError: Missing token/password or password too short
        InvalidResetTokenError: Unknown or already used token
        ResetTokenExpiredError: Token expired
    """
    now = now or datetime.now(UTC)
    token = _clean(data.token)
    password = _clean(data.password)

    if not token or not password:
        raise ValidationError("Token and password are required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    try:
        record = await repository.get_by_hash(db, hash_reset_token(token))
        if record is None or record.used_at is not None:
            raise InvalidResetTokenError()
        if as_utc(record.expires_at) < now:
            raise ResetTokenExpiredError()
        student = await student_repository.get_by_id(db, record.student_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load reset token: {e}")
        raise PersistenceError("Failed to reset password.") from e

    if student is None:
        raise InvalidResetTokenError()

    student_no = student.student_no
    try:
        student.password_hash = hash_password(password)
        record.used_at = now
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to reset password for {student_no}: {e}")
        raise PersistenceError("Failed to reset password.") from e

    logger.info(f"Password reset completed for student {student_no}")

"""
Authentication Router

Endpoints:
- POST /auth/register - Create a student account (Pending)
- POST /auth/login - Student login
- POST /auth/identity-enrollment - Record a successful identity check
- POST /auth/admin/login - Registrar admin login
- POST /auth/forgot-password - Email a password reset link
- POST /auth/reset-password - Set a new password with a reset link
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.database import get_db
from registrar.core.events import EventBroker, get_event_broker
from registrar.core.rate_limit import rate_limit
from registrar.modules.auth import service
from registrar.modules.auth.schemas import (
    AdminAccount,
    AdminLoginResponse,
    ForgotPasswordRequest,
    IdentityEnrollmentRequest,
    IdentityEnrollmentResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    StudentAccount,
    StudentLoginResponse,
)
from registrar.modules.shared.errors import ServiceError, internal_error, raise_http_error

logger = logging.getLogger(__name__)

router = APIRouter()


def _client_ip(request: Request) -> str | None:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Student",
    description="""
Create a student account. New accounts are `Pending` until a registrar
approves them, and identity enrollment is required before the first login.

**Errors:**
- 400 VALIDATION_ERROR: a required field is missing
- 409 DUPLICATE_STUDENT: student number or email already registered
""",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    broker: EventBroker = Depends(get_event_broker),
) -> RegisterResponse:
    try:
        student = await service.register_student(db, broker, data)
        return RegisterResponse(
            message="Account created. Continue to identity enrollment.",
            student=StudentAccount.model_validate(student),
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error registering student: {e}")
        raise internal_error() from e


@router.post(
    "/login",
    response_model=StudentLoginResponse,
    summary="Student Login",
    description="""
Authenticate a student and return JWT tokens.

**Errors:**
- 401 INVALID_CREDENTIALS
- 403 with the reason the account may not sign in:
  `ACCOUNT_PENDING_APPROVAL`, `ACCOUNT_REJECTED`, `ACCOUNT_DEACTIVATED`,
  `ACCOUNT_ON_HOLD`, `IDENTITY_ENROLLMENT_REQUIRED`
""",
)
@rate_limit(limit=10, window_seconds=60)
async def login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> StudentLoginResponse:
    try:
        student, tokens = await service.login_student(db, data)
        return StudentLoginResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            student=StudentAccount.model_validate(student),
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error during student login: {e}")
        raise internal_error() from e


@router.post(
    "/identity-enrollment",
    response_model=IdentityEnrollmentResponse,
    summary="Complete Identity Enrollment",
    description="""
Record that the external identity check verified the student. Idempotent:
the first enrollment time is kept. `verified: false` is rejected with 400.
""",
)
async def identity_enrollment(
    data: IdentityEnrollmentRequest,
    db: AsyncSession = Depends(get_db),
) -> IdentityEnrollmentResponse:
    try:
        student = await service.complete_identity_enrollment(db, data)
        return IdentityEnrollmentResponse(student=StudentAccount.model_validate(student))
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error during identity enrollment: {e}")
        raise internal_error() from e


@router.post(
    "/admin/login",
    response_model=AdminLoginResponse,
    summary="Admin Login",
    description="Authenticate a registrar admin. The access token carries `role`, `email` and `name`.",
)
@rate_limit(limit=10, window_seconds=60)
async def admin_login(
    request: Request,
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AdminLoginResponse:
    try:
        admin, tokens = await service.login_admin(db, data)
        return AdminLoginResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            admin=AdminAccount.model_validate(admin),
        )
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error during admin login: {e}")
        raise internal_error() from e


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request Password Reset",
    description="""
Email a password reset link valid for 30 minutes.

A second request within 60 seconds succeeds without sending another email.

**Errors:**
- 400 VALIDATION_ERROR: missing or invalid email
- 404 EMAIL_NOT_FOUND
- 502 EMAIL_DELIVERY_FAILED
""",
)
@rate_limit(limit=5, window_seconds=300)
async def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        result = await service.request_password_reset(
            db,
            data,
            ip=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        return MessageResponse(message=result.message)
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error requesting password reset: {e}")
        raise internal_error() from e


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset Password",
    description="""
Set a new password (at least 4 characters) using a reset link token.
Each link works once.

**Errors:**
- 400 VALIDATION_ERROR, INVALID_RESET_TOKEN or RESET_TOKEN_EXPIRED
""",
)
async def reset_password(
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    try:
        await service.reset_password(db, data)
        return MessageResponse(message="Password has been reset. You can sign in now.")
    except ServiceError as e:
        raise_http_error(e)
    except Exception as e:
        logger.exception(f"Error resetting password: {e}")
        raise internal_error() from e

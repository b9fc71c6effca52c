"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from registrar.modules.admins.models import AdminRole
from registrar.modules.shared.schemas import CamelModel
from registrar.modules.students.models import StudentStatus

# Fields are optional on input so missing values are reported as
# VALIDATION_ERROR (400) by the service rather than a schema error.


class RegisterRequest(CamelModel):
    student_no: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password: str | None = None
    course: str | None = None
    year_level: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class IdentityEnrollmentRequest(CamelModel):
    student_no: str | None = None
    verified: bool = False


class ForgotPasswordRequest(CamelModel):
    email: str | None = None


class ResetPasswordRequest(CamelModel):
    token: str | None = None
    password: str | None = None


class StudentAccount(CamelModel):
    """Student summary returned by the account endpoints."""

    id: UUID
    student_no: str
    first_name: str
    last_name: str
    email: str
    status: StudentStatus
    identity_enrolled_at: datetime | None = None


class AdminAccount(CamelModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: AdminRole


class RegisterResponse(CamelModel):
    success: bool = True
    message: str
    student: StudentAccount


class StudentLoginResponse(CamelModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    student: StudentAccount


class AdminLoginResponse(CamelModel):
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    admin: AdminAccount


class IdentityEnrollmentResponse(CamelModel):
    success: bool = True
    student: StudentAccount


class MessageResponse(CamelModel):
    success: bool = True
    message: str

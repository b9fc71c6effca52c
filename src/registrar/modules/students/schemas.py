"""
Student Schemas
"""

from datetime import datetime
from uuid import UUID

from registrar.modules.shared.schemas import ActionResponseMixin, CamelModel
from registrar.modules.students.models import StudentStatus


class StudentSummary(CamelModel):
    """Owner details embedded in request listings."""

    student_no: str
    first_name: str
    last_name: str
    email: str


class StudentResponse(CamelModel):
    """Student account as shown to admins."""

    id: UUID
    student_no: str
    first_name: str
    last_name: str
    email: str
    course: str | None = None
    year_level: str | None = None
    phone: str | None = None
    address: str | None = None
    status: StudentStatus
    is_on_hold: bool
    hold_reason: str | None = None
    hold_until: datetime | None = None
    is_deactivated: bool
    deactivated_at: datetime | None = None
    identity_enrolled_at: datetime | None = None
    created_at: datetime


class StudentListResponse(CamelModel):
    students: list[StudentResponse]


class StudentActionResponse(ActionResponseMixin):
    """Response for PATCH /admin/students/{id}."""

    student: StudentResponse


class StudentProfile(CamelModel):
    """The fields a student sees and edits on the profile page."""

    student_no: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    address: str | None = None
    course: str | None = None
    year_level: str | None = None
    status: StudentStatus


class ProfileUpdateRequest(CamelModel):
    """
    Body of ``PUT /profile``.

    Omitted fields are left unchanged. Blank optional fields are cleared.
    """

    student_no: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    course: str | None = None
    year_level: str | None = None


class ProfileResponse(CamelModel):
    success: bool = True
    student: StudentProfile

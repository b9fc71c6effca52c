"""
Document Request Schemas

Request/response bodies for the student request form, the student
dashboard and the admin console.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from registrar.modules.document_requests.models import DocumentType, RequestStatus
from registrar.modules.shared.schemas import ActionResponseMixin, CamelModel
from registrar.modules.students.schemas import StudentSummary

# ============================================
# Student submission
# ============================================


class DocumentLine(CamelModel):
    """One document on the request form."""

    id: str = Field(..., min_length=1, description="Form code (e.g. 'coe') or document type")
    name: str | None = Field(None, max_length=200)
    copies: int = Field(1, ge=1, le=100)
    price: Decimal = Field(Decimal("0"), ge=0, description="Price per copy")


class CreateRequestsBody(CamelModel):
    """Body of POST /requests. One request row is created per document line."""

    student_no: str | None = None
    documents: list[DocumentLine] = Field(default_factory=list)
    purpose: str | None = Field(None, max_length=1000)
    delivery_method: str | None = Field(None, max_length=50)
    payment_method: str | None = Field(None, max_length=50)
    payment_reference: str | None = Field(None, max_length=100)
    total: Decimal | None = Field(None, description="Client-side total (informational)")


class DocumentRequestResponse(CamelModel):
    """A document request."""

    id: UUID
    student_id: UUID
    type: DocumentType
    status: RequestStatus
    reference_no: str
    copies: int
    purpose: str | None = None
    delivery_method: str | None = None
    payment_method: str | None = None
    payment_reference: str | None = None
    total_amount: Decimal
    payment_approved_at: datetime | None = None
    payment_verified_at: datetime | None = None
    payment_verification_note: str | None = None
    receipt_no: str | None = None
    is_on_hold: bool
    hold_reason: str | None = None
    hold_until: datetime | None = None
    requested_at: datetime
    completed_at: datetime | None = None
    updated_at: datetime


class CreateRequestsResponse(CamelModel):
    success: bool = True
    requests: list[DocumentRequestResponse]


class StudentDashboardStats(CamelModel):
    """``pending`` counts pending and processing requests."""

    pending: int
    ready: int
    submitted: int
    total: int


class StudentDashboardResponse(CamelModel):
    success: bool = True
    requests: list[DocumentRequestResponse]
    stats: StudentDashboardStats


# ============================================
# Admin
# ============================================


class AdminRequestResponse(DocumentRequestResponse):
    """Request with its owner, for the admin console."""

    student: StudentSummary | None = None


class AdminRequestListResponse(CamelModel):
    requests: list[AdminRequestResponse]


class RequestActionResponse(ActionResponseMixin):
    """Response for PATCH /admin/requests/{id}."""

    request: DocumentRequestResponse


class OverviewStats(CamelModel):
    pending_requests: int
    processing_today: int
    submitted_today: int
    pending_students: int


class OverviewResponse(CamelModel):
    """Admin dashboard counters and the five most recent requests."""

    stats: OverviewStats
    recent_requests: list[AdminRequestResponse]

"""
Document Request Models

One row per requested document type per submission.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registrar.core.database import Base
from registrar.modules.students.models import Student


class DocumentType(str, enum.Enum):
    """Documents the registrar issues."""

    TRANSCRIPT_OF_RECORDS_OFFICIAL = "transcript_of_records_official"
    TRANSCRIPT_OF_RECORDS_UNOFFICIAL = "transcript_of_records_unofficial"
    CERTIFICATE_OF_GRADES = "certificate_of_grades"
    CERTIFICATE_OF_ENROLLMENT = "certificate_of_enrollment"
    CERTIFICATE_OF_GOOD_MORAL_CHARACTER = "certificate_of_good_moral_character"
    DIPLOMA = "diploma"
    HONORABLE_DISMISSAL = "honorable_dismissal"
    CERTIFICATE_OF_UNITS_EARNED = "certificate_of_units_earned"
    CERTIFICATE_OF_TRANSFER_CREDENTIAL = "certificate_of_transfer_credential"
    CERTIFICATE_OF_GRADUATION = "certificate_of_graduation"


class RequestStatus(str, enum.Enum):
    """Lifecycle status of a document request."""

    PENDING = "pending"
    PROCESSING = "processing"
    SUBMITTED = "submitted"
    READY = "ready"
    REJECTED = "rejected"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class DocumentRequest(Base):
    """
    A student's request for one document.

    Always created ``pending``; mutated only by admin actions; retained
    indefinitely.
    """

    __tablename__ = "document_requests"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Request details
    type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType, name="document_type", values_callable=_enum_values),
        nullable=False,
    )
    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, name="request_status", values_callable=_enum_values),
        nullable=False,
        default=RequestStatus.PENDING,
    )
    reference_no: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    copies: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    delivery_method: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Payment (confirmation itself happens in the external gateway)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    payment_approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_verified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_verification_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Assigned on first approval, never reassigned
    receipt_no: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Hold
    is_on_hold: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hold_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    hold_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Timestamps
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships
    student: Mapped[Student] = relationship(Student, lazy="selectin")

    __table_args__ = (
        Index("ix_document_requests_student_id", "student_id"),
        Index("ix_document_requests_status", "status"),
        Index("ix_document_requests_requested_at", "requested_at"),
    )

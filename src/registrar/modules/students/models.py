"""
Student Models

Student accounts: identity plus the lifecycle flags admins control.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from registrar.modules.shared import BaseModel


class StudentStatus(str, enum.Enum):
    """Approval status of a student account."""

    PENDING = "Pending"
    ACTIVE = "Active"
    REJECTED = "Rejected"


class Student(BaseModel):
    """
    Student account.

    Created at registration with status Pending. Mutated only by admin
    actions (plus the student's own profile edits, password reset and
    identity enrollment).
    Never hard-deleted.
    """

    __tablename__ = "students"

    # Identity
    student_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    # Profile
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    course: Mapped[str | None] = mapped_column(String(200), nullable=True)
    year_level: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Contact details (edited by the student)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Approval
    status: Mapped[StudentStatus] = mapped_column(
        Enum(StudentStatus, name="student_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=StudentStatus.PENDING,
    )

    # Hold
    is_on_hold: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    hold_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    hold_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Deactivation
    is_deactivated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deactivated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Set once the external identity check reports the student as verified
    identity_enrolled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_students_status", "status"),
        Index("ix_students_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, student_no={self.student_no}, status={self.status.value})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

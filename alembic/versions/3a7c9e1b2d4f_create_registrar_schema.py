"""create registrar schema

Revision ID: 3a7c9e1b2d4f
Revises:
Create Date: 2026-03-02 09:00:00.000000

This migration creates:
1. students and admins (accounts)
2. document_requests (one row per requested document)
3. admin_audit_logs (append-only record of admin actions)
4. password_reset_tokens (hashed one-time reset links)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3a7c9e1b2d4f"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

STUDENT_STATUS = ("Pending", "Active", "Rejected")
ADMIN_ROLE = ("admin", "superadmin")
DOCUMENT_TYPE = (
    "transcript_of_records_official",
    "transcript_of_records_unofficial",
    "certificate_of_grades",
    "certificate_of_enrollment",
    "certificate_of_good_moral_character",
    "diploma",
    "honorable_dismissal",
    "certificate_of_units_earned",
    "certificate_of_transfer_credential",
    "certificate_of_graduation",
)
REQUEST_STATUS = ("pending", "processing", "submitted", "ready", "rejected")


def _enum(values: tuple[str, ...], name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create enum types and registrar tables."""
    bind = op.get_bind()
    student_status = _enum(STUDENT_STATUS, "student_status")
    admin_role = _enum(ADMIN_ROLE, "admin_role")
    document_type = _enum(DOCUMENT_TYPE, "document_type")
    request_status = _enum(REQUEST_STATUS, "request_status")
    for enum_type in (student_status, admin_role, document_type, request_status):
        enum_type.create(bind, checkfirst=True)

    # Students
    op.create_table(
        "students",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("student_no", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("course", sa.String(length=200), nullable=True),
        sa.Column("year_level", sa.String(length=50), nullable=True),
        sa.Column("status", student_status, nullable=False, server_default="Pending"),
        sa.Column("is_on_hold", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("hold_reason", sa.Text(), nullable=True),
        sa.Column("hold_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_deactivated", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("identity_enrolled_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("student_no", name="uq_students_student_no"),
        sa.UniqueConstraint("email", name="uq_students_email"),
    )
    op.create_index("ix_students_status", "students", ["status"], unique=False)
    op.create_index("ix_students_created_at", "students", ["created_at"], unique=False)

    # Admins
    op.create_table(
        "admins",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("role", admin_role, nullable=False, server_default="admin"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_admins_email"), "admins", ["email"], unique=True)

    # Document requests
    op.create_table(
        "document_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", document_type, nullable=False),
        sa.Column("status", request_status, nullable=False, server_default="pending"),
        sa.Column("reference_no", sa.String(length=32), nullable=False),
        sa.Column("copies", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("delivery_method", sa.String(length=50), nullable=True),
        # Payment
        sa.Column("payment_method", sa.String(length=50), nullable=True),
        sa.Column("payment_reference", sa.String(length=100), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_verification_note", sa.Text(), nullable=True),
        sa.Column("receipt_no", sa.String(length=32), nullable=True),
        # Hold
        sa.Column("is_on_hold", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("hold_reason", sa.Text(), nullable=True),
        sa.Column("hold_until", sa.DateTime(timezone=True), nullable=True),
        # Timestamps
        sa.Column(
            "requested_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_document_requests_student_id",
            ondelete="RESTRICT",
        ),
        sa.UniqueConstraint("reference_no", name="uq_document_requests_reference_no"),
    )
    op.create_index(
        "ix_document_requests_student_id", "document_requests", ["student_id"], unique=False
    )
    op.create_index("ix_document_requests_status", "document_requests", ["status"], unique=False)
    op.create_index(
        "ix_document_requests_requested_at", "document_requests", ["requested_at"], unique=False
    )

    # Audit log (no foreign keys: entries outlive the rows they describe)
    op.create_table(
        "admin_audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("actor_email", sa.String(length=255), nullable=True),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_admin_audit_logs_created_at", "admin_audit_logs", ["created_at"], unique=False
    )
    op.create_index(
        "ix_admin_audit_logs_entity",
        "admin_audit_logs",
        ["entity_type", "entity_id"],
        unique=False,
    )

    # Password reset tokens
    op.create_table(
        "password_reset_tokens",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_password_reset_tokens_student_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("token_hash", name="uq_password_reset_tokens_token_hash"),
    )
    op.create_index(
        "ix_password_reset_tokens_student_id",
        "password_reset_tokens",
        ["student_id"],
        unique=False,
    )
    op.create_index(
        "ix_password_reset_tokens_expires_at",
        "password_reset_tokens",
        ["expires_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop registrar tables and enum types."""
    op.drop_table("password_reset_tokens")
    op.drop_table("admin_audit_logs")
    op.drop_table("document_requests")
    op.drop_index(op.f("ix_admins_email"), table_name="admins")
    op.drop_table("admins")
    op.drop_table("students")

    bind = op.get_bind()
    for values, name in (
        (REQUEST_STATUS, "request_status"),
        (DOCUMENT_TYPE, "document_type"),
        (ADMIN_ROLE, "admin_role"),
        (STUDENT_STATUS, "student_status"),
    ):
        postgresql.ENUM(*values, name=name).drop(bind, checkfirst=True)

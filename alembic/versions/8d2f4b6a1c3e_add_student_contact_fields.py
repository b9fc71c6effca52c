"""add student contact fields

Revision ID: 8d2f4b6a1c3e
Revises: 3a7c9e1b2d4f
Create Date: 2026-10-19 10:00:00.000000

Adds the phone and address columns students edit on their profile page.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d2f4b6a1c3e"
down_revision: str | Sequence[str] | None = "3a7c9e1b2d4f"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column("students", sa.Column("phone", sa.String(length=50), nullable=True))
    op.add_column("students", sa.Column("address", sa.Text(), nullable=True))


def downgrade() -> None:
    op.drop_column("students", "address")
    op.drop_column("students", "phone")

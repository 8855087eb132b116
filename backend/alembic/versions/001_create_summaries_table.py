"""Create summaries table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `summaries` table holding stored summaries.
How:   Portable column types (sa.Uuid, timezone-aware DateTime) so the same
       migration runs on PostgreSQL and SQLite. IDs and timestamps are set
       by the application.

Rollback: downgrade() drops the table (all stored summaries are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "summaries",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "user_id",
            sa.String(128),
            nullable=True,
            comment="Owner of the summary; NULL for anonymous sessions",
        ),
        sa.Column(
            "session_type",
            sa.String(20),
            nullable=False,
            comment="authenticated | anonymous",
        ),
        sa.Column(
            "summary",
            sa.Text(),
            nullable=False,
            comment="Summary text returned by the model",
        ),
        sa.Column(
            "source_type",
            sa.String(10),
            nullable=False,
            comment="text | file",
        ),
        sa.Column(
            "source_file_name",
            sa.String(255),
            nullable=True,
            comment="Sanitized name of the uploaded file (file summaries only)",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When the summary was stored (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # History query: WHERE user_id = :uid ORDER BY created_at DESC
    op.create_index(
        "idx_summaries_user_created",
        "summaries",
        ["user_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_summaries_user_created", table_name="summaries")
    op.drop_table("summaries")

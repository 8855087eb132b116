"""
NoteBrief Backend: SummaryRecord SQLAlchemy Model
===================================================

What:  ORM model for the `summaries` table.
Who:   Written by SummaryService.save_summary, read by the history endpoint,
       tracked by Alembic.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL agree
    - user_id nullable: anonymous sessions have no user
    - session_type / source_type: short enum-like strings
    - created_at: UTC with timezone
    Rows are immutable once written; nothing updates or deletes them.

    Composite index (user_id, created_at DESC) serves the only query we run:
    "latest summaries of this user".
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notebrief.database import Base

SESSION_TYPES = ("authenticated", "anonymous")
SOURCE_TYPES = ("text", "file")


class SummaryRecord(Base):
    """A persisted summary produced by the pipeline."""

    __tablename__ = "summaries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[Optional[str]] = mapped_column(
        String(128),
        nullable=True,
        comment="Owner of the summary; NULL for anonymous sessions",
    )

    session_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="authenticated | anonymous",
    )

    summary: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Summary text returned by the model",
    )

    source_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="text | file",
    )

    source_file_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Sanitized name of the uploaded file (file summaries only)",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the summary was stored (UTC)",
    )

    __table_args__ = (
        Index("idx_summaries_user_created", "user_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<SummaryRecord(id={self.id}, source_type='{self.source_type}', "
            f"created_at='{self.created_at}')>"
        )

"""
NoteBrief Backend: Summary Persistence Service
================================================

What:  Stores produced summaries and lists a user's history.
Why:   Keeps database access out of the routes and out of the pipeline.
Who:   save_summary() is called by the summarize routes after a successful
       summary; list_summaries() backs GET /api/summaries.

Failure policy:
    Saving is best-effort. A user who asked for a summary gets it even if the
    database is down, so save_summary() reports failure through PersistResult
    instead of raising. It opens its own session: a failed write never
    poisons a request-scoped transaction.

    Listing is the whole point of its request, so it raises DatabaseError.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notebrief.database import async_session_factory
from notebrief.exceptions import DatabaseError, ValidationError
from notebrief.models.summary import SOURCE_TYPES, SummaryRecord
from notebrief.schemas.summary import SummaryListResponse, SummaryRecordResponse
from notebrief.services.document_service import USER_ID_PATTERN

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


@dataclass(frozen=True)
class PersistResult:
    """Outcome of a save attempt. `error` is a short server-side description."""

    saved: bool
    record_id: Optional[uuid.UUID] = None
    error: Optional[str] = None


class SummaryService:
    """
    Persistence gateway for SummaryRecord rows.

    Args:
        session_factory: Async session factory used by save_summary
                         (overridden in tests).
    """

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self.session_factory = session_factory or async_session_factory

    async def save_summary(
        self,
        summary: str,
        source_type: str,
        user_id: Optional[str] = None,
        source_file_name: Optional[str] = None,
    ) -> PersistResult:
        """
        Insert one summary record and commit it.

        session_type is derived from user_id: "authenticated" when present,
        "anonymous" otherwise.
        """
        record = SummaryRecord(
            id=uuid.uuid4(),
            user_id=user_id,
            session_type="authenticated" if user_id else "anonymous",
            summary=summary,
            source_type=source_type,
            source_file_name=source_file_name,
        )

        try:
            async with self.session_factory() as session:
                session.add(record)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            # OSError: connection refused before SQLAlchemy can wrap it
            logger.warning(
                "Failed to save %s summary for user %s (non-critical): %s",
                source_type,
                user_id or "-",
                e,
            )
            return PersistResult(saved=False, error=type(e).__name__)

        logger.info("Summary %s saved (%s, %d chars)", record.id, source_type, len(summary))
        return PersistResult(saved=True, record_id=record.id)

    async def list_summaries(
        self,
        db: AsyncSession,
        user_id: str,
        limit: int = DEFAULT_LIST_LIMIT,
        source_type: Optional[str] = None,
    ) -> SummaryListResponse:
        """
        Return a user's summaries, newest first.

        Query plan:
            SELECT * FROM summaries WHERE user_id = :uid [AND source_type = :t]
            ORDER BY created_at DESC LIMIT :limit
            → idx_summaries_user_created

        Raises:
            ValidationError: malformed user_id or unknown source_type.
            DatabaseError:   the query failed.
        """
        if not user_id or not USER_ID_PATTERN.match(user_id):
            raise ValidationError(message="Formato userId non valido", field="user_id")

        if source_type is not None and source_type not in SOURCE_TYPES:
            raise ValidationError(
                message="Tipo di riassunto non valido",
                field="source_type",
                context={"source_type": source_type},
            )

        if limit < 1 or limit > MAX_LIST_LIMIT:
            limit = DEFAULT_LIST_LIMIT

        query = select(SummaryRecord).where(SummaryRecord.user_id == user_id)
        if source_type:
            query = query.where(SummaryRecord.source_type == source_type)
        query = query.order_by(desc(SummaryRecord.created_at)).limit(limit)

        try:
            result = await db.execute(query)
            records: List[SummaryRecord] = list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database error listing summaries: %s", e, exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        items = [SummaryRecordResponse.model_validate(r) for r in records]
        return SummaryListResponse(summaries=items, count=len(items))


# ── Singleton Instance ────────────────────────────────────────────────────
summary_service = SummaryService()

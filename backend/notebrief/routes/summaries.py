"""
NoteBrief Backend: Summary History Route
==========================================

What:  GET /api/summaries, a user's stored summaries, newest first.
Who:   Called by the history page of the frontend.

Query parameters:
    user_id:      required, same format rules as the summarize endpoints
    limit:        1-100, anything else falls back to 20
    source_type:  optional filter, "text" or "file"
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from notebrief.database import get_db_session
from notebrief.schemas.summary import ErrorResponse, SummaryListResponse
from notebrief.services.summary_service import DEFAULT_LIST_LIMIT, summary_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Summaries"])


@router.get(
    "/summaries",
    response_model=SummaryListResponse,
    responses={
        400: {"description": "Invalid user_id or source_type", "model": ErrorResponse},
        500: {"description": "Database error", "model": ErrorResponse},
    },
    summary="List stored summaries",
)
async def list_summaries(
    user_id: str = Query(default="", description="Owner of the summaries"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, description="Maximum items (1-100)"),
    source_type: Optional[str] = Query(default=None, description="text or file"),
    db: AsyncSession = Depends(get_db_session),
) -> SummaryListResponse:
    return await summary_service.list_summaries(
        db=db,
        user_id=user_id,
        limit=limit,
        source_type=source_type,
    )

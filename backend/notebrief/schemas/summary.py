"""
NoteBrief Backend: Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the public API contract.
Why:   Strict input validation, automatic serialization, and OpenAPI docs.
Who:   Route handlers (request bodies, response_model) and the frontend.
When:  Validated on every request and serialized on every response.

Design Decision:
    Schemas are separate from the SQLAlchemy model. The API never exposes
    anything the table holds that the client did not ask for, and the
    summarize responses carry fields (previews, persisted flag) that have
    no column at all.

    Request bodies are deliberately loose (text is Optional) so that a missing
    field produces the product's own 400 message instead of FastAPI's 422.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SummarizeRequest(BaseModel):
    """Body of POST /api/summarize."""

    text: Optional[str] = Field(default=None, description="Text to summarize")
    user_id: Optional[str] = Field(
        default=None,
        description="Authenticated user ID; when present the summary is stored",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SummarizeResponse(BaseModel):
    """
    Returned by POST /api/summarize.

    persisted is False both for anonymous calls and when storing the
    record failed; the summary is returned either way.
    """

    summary: str = Field(description="Summary produced by the model")
    persisted: bool = Field(default=False, description="Whether the summary was stored")
    record_id: Optional[uuid.UUID] = Field(default=None, description="ID of the stored record")


class UploadSummaryResponse(SummarizeResponse):
    """Returned by POST /api/upload-and-summarize."""

    extracted_text_preview: str = Field(
        description="First 200 characters of the extracted text (of the summary, for images)"
    )
    original_file_name: str = Field(description="Sanitized name of the uploaded file")
    mime_type: str = Field(description="Declared media type of the upload (may be empty)")


class SummaryRecordResponse(BaseModel):
    """One stored summary, as returned by the history endpoint."""

    id: uuid.UUID = Field(description="Record identifier")
    user_id: Optional[str] = Field(default=None, description="Owner of the summary")
    session_type: str = Field(description="authenticated or anonymous")
    summary: str = Field(description="Summary text")
    source_type: str = Field(description="text or file")
    source_file_name: Optional[str] = Field(default=None, description="Uploaded file name")
    created_at: datetime = Field(description="When the summary was stored (UTC)")

    model_config = {"from_attributes": True}


class SummaryListResponse(BaseModel):
    """Returned by GET /api/summaries, newest first."""

    summaries: List[SummaryRecordResponse] = Field(description="Stored summaries")
    count: int = Field(description="Number of summaries in this response")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for every failing endpoint.

    Example:
        {
            "error": "service_unavailable",
            "message": "Servizio AI temporaneamente non disponibile",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="User-facing message (Italian)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and dependency status for GET /health."""

    status: str = Field(description="Overall status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")

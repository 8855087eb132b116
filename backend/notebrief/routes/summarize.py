"""
NoteBrief Backend: Summarize Route Handlers
=============================================

What:  POST /api/summarize and POST /api/upload-and-summarize.
Why:   Entry points for the core feature: text or document in, summary out.
How:   Validate with DocumentService, summarize with the Gemini pipeline,
       then optionally store the result with SummaryService.
Who:   Called by the dashboard page of the frontend.

Request Flow (upload):
    1. multipart/form-data with `file` (and optional `user_id`)
    2. DocumentService: sanitize name → type → size → extract
    3. text/pdf → summarize_text(extracted)   image → summarize_image(base64)
    4. user_id present → save_summary (failure only flips `persisted`)
    5. 200 with summary, preview, file name, MIME type

Errors are raised, never formatted here; the global handlers in main.py
map them to status codes and Italian messages.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile

from notebrief.exceptions import ValidationError
from notebrief.schemas.summary import (
    ErrorResponse,
    SummarizeRequest,
    SummarizeResponse,
    UploadSummaryResponse,
)
from notebrief.services.document_service import PREVIEW_LENGTH, document_service
from notebrief.services.summarization_service import summarizer
from notebrief.services.summary_service import PersistResult, summary_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Summarize"])

_ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    500: {"description": "Summarization failed", "model": ErrorResponse},
    503: {"description": "AI service temporarily unavailable", "model": ErrorResponse},
}


async def _persist(
    summary: str,
    source_type: str,
    user_id: Optional[str],
    source_file_name: Optional[str] = None,
) -> PersistResult:
    # Anonymous sessions are never stored
    if not user_id:
        return PersistResult(saved=False)

    result = await summary_service.save_summary(
        summary=summary,
        source_type=source_type,
        user_id=user_id,
        source_file_name=source_file_name,
    )
    if not result.saved:
        logger.warning("Summary returned without being stored: %s", result.error)
    return result


@router.post(
    "/summarize",
    response_model=SummarizeResponse,
    responses=_ERROR_RESPONSES,
    summary="Summarize a text",
    description=(
        "Summarize up to 50,000 characters of text in 3-5 Italian sentences. "
        "When user_id is given the summary is also stored in the history."
    ),
)
async def summarize_text(body: SummarizeRequest) -> SummarizeResponse:
    text = document_service.validate_text(body.text)
    user_id = document_service.validate_user_id(body.user_id)

    logger.info("Received summarize request: %d chars, user=%s", len(text), user_id or "-")

    summary = await summarizer.summarize_text(text)
    persisted = await _persist(summary, "text", user_id)

    return SummarizeResponse(
        summary=summary,
        persisted=persisted.saved,
        record_id=persisted.record_id,
    )


@router.post(
    "/upload-and-summarize",
    response_model=UploadSummaryResponse,
    responses=_ERROR_RESPONSES,
    summary="Summarize an uploaded document",
    description=(
        "Upload a .txt, .md, .pdf, .jpg, .jpeg or .png file (max 10MB). "
        "Text is extracted (PDF) or read directly; images are read by the model. "
        "The result is summarized in 3-5 Italian sentences."
    ),
)
async def upload_and_summarize(
    file: Optional[UploadFile] = File(default=None, description="Document to summarize"),
    user_id: Optional[str] = Form(default=None, description="Authenticated user ID"),
) -> UploadSummaryResponse:
    if file is None:
        raise ValidationError(message="Nessun file caricato", field="file")

    try:
        user_id = document_service.validate_user_id(user_id)
        content = await file.read()

        logger.info(
            "Received upload: filename=%s, content_type=%s, size=%d bytes",
            file.filename or "unknown",
            file.content_type or "-",
            len(content),
        )

        prepared = await document_service.prepare_upload(
            filename=file.filename,
            content=content,
            mime_type=file.content_type,
        )
    finally:
        await file.close()

    if prepared.is_image:
        summary = await summarizer.summarize_image(
            prepared.image_base64, prepared.image_mime_type
        )
        # Images have no extracted text of their own; preview the summary
        preview = summary[:PREVIEW_LENGTH]
    else:
        summary = await summarizer.summarize_text(prepared.text)
        preview = prepared.text[:PREVIEW_LENGTH]

    persisted = await _persist(summary, "file", user_id, prepared.original_file_name)

    return UploadSummaryResponse(
        summary=summary,
        extracted_text_preview=preview,
        original_file_name=prepared.original_file_name,
        mime_type=prepared.mime_type,
        persisted=persisted.saved,
        record_id=persisted.record_id,
    )

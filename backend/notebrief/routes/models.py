"""
NoteBrief Backend: Debug Model Listing Route
==============================================

What:  GET /api/debug/models returns the raw Gemini model listing.
Why:   Shows which models the configured API key can see while developing.
Who:   Developers only. Disabled when ENVIRONMENT=production.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from notebrief.config import settings
from notebrief.exceptions import DiscoveryError, FeatureDisabledError
from notebrief.schemas.summary import ErrorResponse
from notebrief.services.gemini_client import gemini_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/debug", tags=["Debug"])


@router.get(
    "/models",
    responses={
        403: {"description": "Disabled in production", "model": ErrorResponse},
        500: {"description": "Model listing failed", "model": ErrorResponse},
    },
    summary="List Gemini models (development only)",
)
async def list_models() -> JSONResponse:
    if settings.is_production:
        raise FeatureDisabledError()

    response = await gemini_client.list_models()
    if not response.is_success:
        logger.error("Model listing failed: %d %s", response.status_code, response.text[:500])
        raise DiscoveryError(context={"http_status": response.status_code})

    try:
        payload = response.json()
    except ValueError as e:
        raise DiscoveryError(context={"error": str(e)}) from e

    return JSONResponse(content=payload, status_code=200)

"""
NoteBrief Backend: Gemini REST Transport
==========================================

What:  Thin async wrapper over the two Generative Language endpoints we use.
Why:   Model discovery and retry classification need the raw HTTP status and
       body of every response, so we speak REST directly instead of going
       through an SDK that hides them.
How:   One shared httpx.AsyncClient (connection pooling, base URL, API key
       header). HTTP error statuses are returned to the caller untouched;
       only network-level failures are converted, into TransportError.
Who:   Used by ModelRegistry (listing) and the summarization pipeline (generation).

Security:
    The API key travels in the `x-goog-api-key` header, never in the URL,
    so it cannot end up in access logs or exception messages.
"""

import logging
import time
from typing import Optional

import httpx

from notebrief.config import settings
from notebrief.exceptions import TransportError
from notebrief.schemas.gemini import GenerationRequest

logger = logging.getLogger(__name__)


def normalize_model_name(name: str) -> str:
    """generateContent URLs need the ``models/`` prefix; listed names already carry it."""
    if name.startswith("models/"):
        return name
    return f"models/{name}"


class GeminiClient:
    """
    Issues raw requests to the Generative Language API.

    Both methods return the httpx.Response whatever its status. Interpreting
    the status (discovery failure, retryable, success) is the caller's job.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"x-goog-api-key": self._api_key},
            timeout=timeout or settings.gemini_timeout,
            transport=transport,
        )

    async def list_models(self) -> httpx.Response:
        return await self._send("GET", "/models")

    async def generate_content(
        self, model_name: str, request: GenerationRequest
    ) -> httpx.Response:
        path = f"/{normalize_model_name(model_name)}:generateContent"
        return await self._send("POST", path, json=request.to_payload())

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        start_time = time.perf_counter()
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Gemini %s %s failed after %.0fms: %s: %s",
                method,
                path,
                duration_ms,
                type(e).__name__,
                str(e),
            )
            raise TransportError(
                context={"method": method, "path": path, "error_type": type(e).__name__}
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Gemini %s %s -> %d in %.0fms", method, path, response.status_code, duration_ms
        )
        return response

    async def aclose(self) -> None:
        await self._http.aclose()


# ── Singleton Instance ────────────────────────────────────────────────────
# Shared so every request reuses the same connection pool.
gemini_client = GeminiClient()

"""
NoteBrief Backend: Gemini Summarization Pipeline
==================================================

What:  Concrete SummarizationService backed by the Gemini REST API.
How:   For every call:
           1. ModelRegistry.resolve()          (cached after the first call)
           2. build the GenerationRequest       (content_normalizer)
           3. RetryExecutor.execute()           (503 / UNAVAILABLE retried)
           4. extract candidates[0].content.parts[0].text, trimmed
Who:   Instantiated once at import; called by the summarize routes.

Per-call state machine:
    Idle → ResolvingModel → BuildingRequest → Attempting(n) → Succeeded | Exhausted

Error translation:
    GenerationFailure → GenerationUnavailableError (HTTP 503 or UNAVAILABLE)
                      → GenerationFailedError      (anything else)
    empty text        → EmptySummaryError
    Provider messages and bodies are logged here and kept in the exception
    context; the user-facing message is fixed per exception class.

Side effects:
    Network calls only. The model cache in ModelRegistry is the only state
    that outlives a call.
"""

import logging
import time
import uuid
from functools import partial
from typing import Optional

from notebrief.exceptions import (
    EmptySummaryError,
    GenerationFailedError,
    GenerationUnavailableError,
    SummarizationError,
)
from notebrief.schemas.gemini import GenerationFailure, GenerationOutcome, GenerationRequest
from notebrief.services.content_normalizer import (
    TEXT_SUMMARY_PROMPT,
    build_image_request,
    build_text_request,
)
from notebrief.services.gemini_client import GeminiClient, gemini_client
from notebrief.services.llm_base import SummarizationService
from notebrief.services.model_registry import ModelRegistry
from notebrief.services.retry_executor import RetryExecutor

logger = logging.getLogger(__name__)


class GeminiSummarizer(SummarizationService):
    """
    Orchestrates Model Registry → Content Normalizer → Retry Executor.

    Collaborators are injectable so tests can drive the whole pipeline
    against an httpx.MockTransport with a recording sleep function.
    """

    def __init__(
        self,
        client: GeminiClient,
        registry: Optional[ModelRegistry] = None,
        executor: Optional[RetryExecutor] = None,
        text_prompt: str = TEXT_SUMMARY_PROMPT,
    ):
        self.client = client
        self.registry = registry or ModelRegistry(client)
        self.executor = executor or RetryExecutor()
        self.text_prompt = text_prompt

        logger.info(
            "GeminiSummarizer initialized with base_url=%s, max_attempts=%d",
            client.base_url,
            self.executor.max_attempts,
        )

    async def summarize_text(self, text: str) -> str:
        return await self._summarize(
            kind="text",
            build=lambda: build_text_request(self.text_prompt, text),
            input_size=len(text),
        )

    async def summarize_image(self, image_base64: str, mime_type: str) -> str:
        return await self._summarize(
            kind="image",
            build=lambda: build_image_request(image_base64, mime_type),
            input_size=len(image_base64),
        )

    async def _summarize(self, kind: str, build, input_size: int) -> str:
        # Short per-call ID to correlate the log lines of one pipeline run
        call_id = str(uuid.uuid4())[:8]
        start_time = time.perf_counter()

        logger.debug("[%s] ResolvingModel (%s input, %d chars)", call_id, kind, input_size)
        model = await self.registry.resolve()

        logger.debug("[%s] BuildingRequest for %s", call_id, model.name)
        request: GenerationRequest = build()

        outcome: GenerationOutcome = await self.executor.execute(
            partial(self.client.generate_content, model.name), request
        )
        duration_ms = (time.perf_counter() - start_time) * 1000

        if isinstance(outcome, GenerationFailure):
            raise self._failure_to_error(call_id, model.name, outcome, duration_ms)

        summary = outcome.summary_text
        if not summary:
            logger.error("[%s] Empty summary in response from %s", call_id, model.name)
            raise EmptySummaryError(context={"call_id": call_id, "model": model.name})

        logger.info(
            "[%s] %s summary completed in %.0fms, %d chars",
            call_id,
            kind.capitalize(),
            duration_ms,
            len(summary),
        )
        return summary

    @staticmethod
    def _failure_to_error(
        call_id: str, model_name: str, failure: GenerationFailure, duration_ms: float
    ) -> SummarizationError:
        logger.error(
            "[%s] Gemini generateContent error after %.0fms: status=%d provider_status=%s "
            "model=%s body=%s",
            call_id,
            duration_ms,
            failure.http_status,
            failure.provider_status,
            model_name,
            failure.raw_body[:1000],
        )
        error_cls = GenerationUnavailableError if failure.retryable else GenerationFailedError
        return error_cls(
            http_status=failure.http_status,
            provider_status=failure.provider_status,
            provider_message=failure.provider_message,
            context={"call_id": call_id, "model": model_name},
        )

    async def health_check(self) -> bool:
        """Resolving the model doubles as a connectivity and API key check."""
        try:
            await self.registry.resolve()
            return True
        except SummarizationError as e:
            logger.warning("Gemini health check failed: %s", e.context)
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
# Shared so the model cache is process-wide.
summarizer = GeminiSummarizer(gemini_client)

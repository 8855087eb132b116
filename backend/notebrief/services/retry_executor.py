"""
NoteBrief Backend: Retry Executor
===================================

What:  Sends a generateContent request, retrying while the model is unavailable.
Why:   Gemini regularly answers 503 / UNAVAILABLE under load; those clear up
       within a second or two, everything else does not.
How:   Tenacity AsyncRetrying with a deterministic delay schedule.

Retry policy:
    - Attempts: retry_max_attempts (default 3)
    - Delay before attempt n: retry_delays_ms[n-1] → 0ms, 500ms, 1500ms.
      Attempts past the end of the schedule reuse its LAST delay.
    - Retryable: HTTP 503, or an error body whose error.status == "UNAVAILABLE".
    - Not retried: any other status, undecodable bodies, and network errors
      (TransportError propagates out of the first failing attempt).
    - No jitter.

Outcome:
    The executor never raises for HTTP failures. It returns GenerationSuccess,
    or the GenerationFailure of the attempt that ended the loop. Turning a
    failure into an exception is the pipeline's job.

State per call:
    Attempting(1) → Attempting(2) → ... only on retryable failures with
    attempts remaining; any other outcome ends the loop.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt
from tenacity.wait import wait_base

from notebrief.config import settings
from notebrief.schemas.gemini import (
    GenerationFailure,
    GenerationOutcome,
    GenerationRequest,
    GenerationSuccess,
    decode_error_body,
    decode_generate_response,
)

logger = logging.getLogger(__name__)

SendFn = Callable[[GenerationRequest], Awaitable[httpx.Response]]
SleepFn = Callable[[float], Awaitable[None]]


class wait_fixed_schedule(wait_base):
    """
    Tenacity wait strategy reading delays from a fixed schedule.

    Tenacity asks for the wait after attempt n has failed, i.e. the delay
    that precedes attempt n+1.
    """

    def __init__(self, delays_ms: Sequence[int]):
        if not delays_ms:
            raise ValueError("delay schedule must not be empty")
        self.delays = [d / 1000 for d in delays_ms]

    def delay_before(self, attempt_number: int) -> float:
        index = min(attempt_number - 1, len(self.delays) - 1)
        return self.delays[index]

    def __call__(self, retry_state: RetryCallState) -> float:
        return self.delay_before(retry_state.attempt_number + 1)


def _is_retryable(outcome: GenerationOutcome) -> bool:
    return isinstance(outcome, GenerationFailure) and outcome.retryable


def _last_outcome(retry_state: RetryCallState) -> GenerationOutcome:
    # Attempts exhausted on a retryable failure: hand back that failure
    return retry_state.outcome.result()


def _log_retry(retry_state: RetryCallState) -> None:
    failure = retry_state.outcome.result()
    logger.warning(
        "GenerateContent attempt %d failed (%d %s), retrying in %.1fs",
        retry_state.attempt_number,
        failure.http_status,
        failure.provider_status or "-",
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


class RetryExecutor:
    """Runs one generation request under the retry policy described above."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        delays_ms: Optional[Sequence[int]] = None,
        sleep: Optional[SleepFn] = None,
    ):
        self.max_attempts = max_attempts or settings.retry_max_attempts
        self.wait = wait_fixed_schedule(
            delays_ms if delays_ms is not None else settings.retry_delays_ms
        )
        self._sleep = sleep or asyncio.sleep

    async def execute(self, send: SendFn, request: GenerationRequest) -> GenerationOutcome:
        """
        Issue `request` through `send`, retrying transient failures.

        Raises:
            TransportError: from `send`, on the first network-level failure.
        """
        first_delay = self.wait.delay_before(1)
        if first_delay > 0:
            await self._sleep(first_delay)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            retry=retry_if_result(_is_retryable),
            retry_error_callback=_last_outcome,
            before_sleep=_log_retry,
            sleep=self._sleep,
        )
        return await retrying(self._attempt, send, request)

    async def _attempt(self, send: SendFn, request: GenerationRequest) -> GenerationOutcome:
        response = await send(request)

        if response.is_success:
            return GenerationSuccess(response=decode_generate_response(response.text))

        raw_body = response.text
        return GenerationFailure(
            http_status=response.status_code,
            body=decode_error_body(raw_body),
            raw_body=raw_body,
        )

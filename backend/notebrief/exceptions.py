"""
NoteBrief Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure the API can report.
Why:   Each exception carries a user-safe message plus a private context dict.
       Global handlers (registered in main.py) turn them into JSON responses
       with the right status code and log the context server-side.
Who:   Raised by services; caught by the global handlers.

Exception Hierarchy:
    NoteBriefError (base)
    ├── ValidationError                → 400 Bad Request
    ├── FeatureDisabledError           → 403 Forbidden
    ├── ExtractionError                → 500 (PDF text extraction failed)
    ├── DatabaseError                  → 500
    └── SummarizationError             (pipeline errors, one handler)
        ├── DiscoveryError             → 500 no usable model / listing failed
        ├── TransportError             → 500 network-level failure
        ├── EmptySummaryError          → 500 success response without text
        └── GenerationError            (non-2xx from generateContent)
            ├── GenerationUnavailableError → 503 (HTTP 503 or UNAVAILABLE)
            └── GenerationFailedError      → 500 everything else

User-facing messages are Italian, matching the product UI. Provider messages
and response bodies only ever travel in `context`, which is never returned.
"""

from typing import Any, Dict, Optional


class NoteBriefError(Exception):
    """
    Base exception for all NoteBrief application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "Errore interno del server",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteBriefError):
    """
    Raised when client input fails validation.

    When:    Missing text, oversize input, unsupported file type, bad user ID.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Richiesta non valida",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class FeatureDisabledError(NoteBriefError):
    """Raised when a development-only endpoint is called in production."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Non disponibile in produzione",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ExtractionError(NoteBriefError):
    """
    Raised when text cannot be extracted from an uploaded document.

    The parser's own error is kept in context; the client only learns that
    the PDF could not be processed.
    """

    error_code = "extraction_error"

    def __init__(
        self,
        message: str = "Errore nell'elaborazione del PDF",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NoteBriefError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. SQL, constraint
        names and driver errors are logged server-side only.
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "Impossibile recuperare i riassunti",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Summarization pipeline errors
# ══════════════════════════════════════════════════════════════════════════


class SummarizationError(NoteBriefError):
    """
    Base class for failures of the summarization pipeline.

    Every subclass fixes its own user message, so whatever detail the caller
    passes in `context` can never reach the response body.
    """

    user_message: str = "Errore nella generazione del riassunto"
    error_code = "summarization_error"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=self.user_message, context=context)


class DiscoveryError(SummarizationError):
    """
    No eligible Gemini model could be discovered.

    When:    The model-listing call returned a non-2xx status, or no listed
             model matches the configured prefix and generation capability.
    """

    user_message = "Errore nella configurazione del modello AI"
    error_code = "model_discovery_error"


class TransportError(SummarizationError):
    """
    Network-level failure talking to the Gemini API.

    When:    Connection refused, DNS failure, timeout: anything where no HTTP
             response was received. Never retried.
    """

    error_code = "transport_error"


class EmptySummaryError(SummarizationError):
    """The API answered successfully but no usable text could be extracted."""

    user_message = "Nessun riassunto restituito dal modello"
    error_code = "empty_summary"


class GenerationError(SummarizationError):
    """
    generateContent returned a non-success HTTP response.

    Attributes:
        http_status:      Status code of the final attempt
        provider_status:  `error.status` from the provider body, if decodable
        provider_message: `error.message` from the provider body (server-side only)
    """

    error_code = "generation_error"

    def __init__(
        self,
        http_status: int,
        provider_status: Optional[str] = None,
        provider_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update(
            {
                "http_status": http_status,
                "provider_status": provider_status,
                "provider_message": provider_message,
            }
        )
        super().__init__(context=ctx)
        self.http_status = http_status
        self.provider_status = provider_status
        self.provider_message = provider_message


class GenerationUnavailableError(GenerationError):
    """The model stayed unavailable (HTTP 503 / UNAVAILABLE) through every retry."""

    status_code = 503
    user_message = "Servizio AI temporaneamente non disponibile"
    error_code = "service_unavailable"


class GenerationFailedError(GenerationError):
    """Any other non-success generateContent response. Not retried."""

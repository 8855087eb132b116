"""
NoteBrief Backend: Gemini REST Wire Models
============================================

What:  Pydantic models for the bodies exchanged with the Generative Language API.
Why:   Request payloads are built from immutable, typed parts; response bodies
       are decoded into typed shapes instead of being poked at as raw dicts.
How:   Field aliases map snake_case attributes onto the API's camelCase keys.

Endpoints covered:
    GET  /models                       → ModelListResponse
    POST /{model}:generateContent      → GenerateContentResponse | error body

Decoding rule:
    Response bodies are decoded with `decode_*` helpers that never raise.
    An error body is either a ProviderErrorBody ({"error": {...}}) or an
    UnrecognizedErrorBody carrying the raw text; a success body that does
    not match the expected shape decodes to a response with no candidates.
"""

from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError


# ══════════════════════════════════════════════════════════════════════════
# Model listing
# ══════════════════════════════════════════════════════════════════════════


class ModelInfo(BaseModel):
    """One entry of the model listing."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    supported_generation_methods: List[str] = Field(
        default_factory=list, alias="supportedGenerationMethods"
    )

    def supports(self, method: str) -> bool:
        return method in self.supported_generation_methods


class ModelListResponse(BaseModel):
    models: List[ModelInfo] = Field(default_factory=list)


class ModelDescriptor(BaseModel):
    """A resolved model identifier, e.g. ``models/gemini-2.0-flash-001``."""

    model_config = ConfigDict(frozen=True)

    name: str


# ══════════════════════════════════════════════════════════════════════════
# Generation request
# ══════════════════════════════════════════════════════════════════════════


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class InlineData(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mime_type: str = Field(alias="mimeType")
    data: str = Field(description="Base64-encoded bytes")


class InlinePart(BaseModel):
    """Binary content (an image) sent inline next to its media type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    inline_data: InlineData = Field(alias="inlineData")


Part = Union[TextPart, InlinePart]


class GenerationRequest(BaseModel):
    """A single user turn. Built fresh per call and never modified."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user"] = "user"
    parts: Tuple[Part, ...]

    def to_payload(self) -> dict:
        """Body for POST {model}:generateContent."""
        return {"contents": [self.model_dump(mode="json", by_alias=True)]}


# ══════════════════════════════════════════════════════════════════════════
# Generation response
# ══════════════════════════════════════════════════════════════════════════


class ResponsePart(BaseModel):
    text: Optional[str] = None


class CandidateContent(BaseModel):
    parts: List[ResponsePart] = Field(default_factory=list)


class Candidate(BaseModel):
    content: Optional[CandidateContent] = None


class GenerateContentResponse(BaseModel):
    candidates: List[Candidate] = Field(default_factory=list)

    def first_text(self) -> str:
        """Text of the first part of the first candidate, trimmed ('' if absent)."""
        if not self.candidates:
            return ""
        content = self.candidates[0].content
        if content is None or not content.parts:
            return ""
        return (content.parts[0].text or "").strip()


class ProviderError(BaseModel):
    code: Optional[int] = None
    message: Optional[str] = None
    status: Optional[str] = None


class ProviderErrorBody(BaseModel):
    """Well-formed ``{"error": {"code", "message", "status"}}`` body."""

    kind: Literal["provider"] = "provider"
    error: ProviderError


class UnrecognizedErrorBody(BaseModel):
    """Anything else: HTML error pages, truncated JSON, empty bodies."""

    kind: Literal["unrecognized"] = "unrecognized"
    raw: str = ""


ErrorBody = Union[ProviderErrorBody, UnrecognizedErrorBody]


def decode_error_body(raw: str) -> ErrorBody:
    try:
        return ProviderErrorBody.model_validate_json(raw)
    except PydanticValidationError:
        return UnrecognizedErrorBody(raw=raw)


def decode_generate_response(raw: str) -> GenerateContentResponse:
    try:
        return GenerateContentResponse.model_validate_json(raw)
    except PydanticValidationError:
        return GenerateContentResponse()


# ══════════════════════════════════════════════════════════════════════════
# Generation outcome (one per pipeline call)
# ══════════════════════════════════════════════════════════════════════════


class GenerationSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    response: GenerateContentResponse

    @property
    def summary_text(self) -> str:
        return self.response.first_text()


class GenerationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    http_status: int
    body: ErrorBody = Field(discriminator="kind")
    raw_body: str = ""

    @property
    def provider_status(self) -> Optional[str]:
        if isinstance(self.body, ProviderErrorBody):
            return self.body.error.status
        return None

    @property
    def provider_message(self) -> Optional[str]:
        if isinstance(self.body, ProviderErrorBody):
            return self.body.error.message
        return None

    @property
    def retryable(self) -> bool:
        """Transient: HTTP 503, or a provider status of UNAVAILABLE."""
        return self.http_status == 503 or self.provider_status == "UNAVAILABLE"


GenerationOutcome = Union[GenerationSuccess, GenerationFailure]

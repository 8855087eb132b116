"""
NoteBrief Backend: Model Registry
===================================

What:  Discovers which Gemini model to call and remembers it for the process.
Why:   Model names get retired; asking the API which models exist avoids
       hard-coding one that may disappear.
How:   Lists models once, picks the first entry whose name starts with the
       configured prefix AND that supports generateContent, caches it.

Selection policy:
    First match in list order. No scoring, no preference among several
    matches.

Caching:
    The resolved descriptor lives for the process lifetime: no expiry and no
    invalidation when a later generation call fails. A failed discovery caches
    nothing, so the next request tries again.

Concurrency:
    Discovery runs under an asyncio.Lock with a second cache check inside it,
    so N requests arriving before the cache is warm trigger ONE listing call
    and all receive the same descriptor.
"""

import asyncio
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from notebrief.config import settings
from notebrief.exceptions import DiscoveryError
from notebrief.schemas.gemini import ModelDescriptor, ModelListResponse
from notebrief.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Lazily-resolved, process-wide cache of the generation model."""

    def __init__(
        self,
        client: GeminiClient,
        prefix: Optional[str] = None,
        generation_method: Optional[str] = None,
    ):
        self.client = client
        self.prefix = prefix or settings.gemini_model_prefix
        self.generation_method = generation_method or settings.gemini_generation_method
        self._cached: Optional[ModelDescriptor] = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> Optional[ModelDescriptor]:
        return self._cached

    async def resolve(self) -> ModelDescriptor:
        """
        Return the model to use for generation.

        Raises:
            DiscoveryError: listing returned a non-2xx status, or no entry matched.
            TransportError: the listing call never got an HTTP response.
        """
        if self._cached is not None:
            return self._cached

        async with self._lock:
            # Another coroutine may have finished discovery while we waited
            if self._cached is not None:
                return self._cached

            descriptor = await self._discover()
            self._cached = descriptor
            logger.info("Discovered available model: %s", descriptor.name)
            return descriptor

    async def _discover(self) -> ModelDescriptor:
        response = await self.client.list_models()

        if not response.is_success:
            logger.error(
                "Failed to list models: status=%d body=%s",
                response.status_code,
                response.text[:500],
            )
            raise DiscoveryError(
                context={"http_status": response.status_code, "stage": "list_models"}
            )

        try:
            listing = ModelListResponse.model_validate_json(response.content or b"{}")
        except PydanticValidationError as e:
            logger.error("Model listing body could not be decoded: %s", str(e))
            raise DiscoveryError(context={"stage": "decode_listing"}) from e

        for model in listing.models:
            if model.name.startswith(self.prefix) and model.supports(self.generation_method):
                return ModelDescriptor(name=model.name)

        available = [m.name for m in listing.models]
        logger.error(
            "No model matching prefix=%s with %s support. Available models: %s",
            self.prefix,
            self.generation_method,
            ", ".join(available) or "(none)",
        )
        raise DiscoveryError(
            context={"prefix": self.prefix, "available_models": available}
        )

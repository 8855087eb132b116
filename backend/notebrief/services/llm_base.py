"""
NoteBrief Backend: Abstract Summarization Service Interface
=============================================================

What:  Abstract base class defining the contract for summarization providers.
Why:   Routes depend on this interface, not on Gemini; tests substitute a
       mock implementation without touching HTTP.
How:   Concrete implementations inherit from SummarizationService.
"""

from abc import ABC, abstractmethod


class SummarizationService(ABC):
    """
    Abstract interface for AI-powered summarization.

    Contract:
        - Both summarize methods return a non-empty, trimmed summary
        - Failures raise a SummarizationError subclass whose user message is
          safe to show; provider detail stays in the exception context
        - The caller should not need to know which provider is used
    """

    @abstractmethod
    async def summarize_text(self, text: str) -> str:
        """
        Summarize plain text.

        Raises:
            DiscoveryError: No usable model could be found.
            TransportError: The provider could not be reached.
            GenerationUnavailableError: Provider stayed unavailable through all retries.
            GenerationFailedError: Provider rejected the request.
            EmptySummaryError: Provider answered without usable text.
        """
        ...

    @abstractmethod
    async def summarize_image(self, image_base64: str, mime_type: str) -> str:
        """
        Extract the readable text from an image and summarize it.

        Args:
            image_base64: Image bytes, base64-encoded.
            mime_type:    Media type of the image (image/png, image/jpeg).

        Raises: same as summarize_text.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the provider is reachable and a model is usable."""
        ...

"""
NoteBrief Backend: Document Ingestion Service
===============================================

What:  Validates user input and turns an upload into something summarizable.
Why:   Keeps every rule about accepted input in one place, away from HTTP.
How:   Text is decoded, PDFs go through pdfplumber, images are base64-encoded
       for an inline Gemini part. Nothing is written to disk.
Who:   Called by the summarize routes before the summarization pipeline.

Acceptance rules:
    1. File name:  last path component, dangerous characters removed
    2. Type:       allowed extension OR allowed declared MIME type
                   (a missing MIME type counts as allowed)
    3. Size:       at most settings.max_file_size bytes
    4. Kind:       text → pdf → image, first match on MIME type or extension

    The declared MIME type is trusted as sent by the browser; content is
    never sniffed.

Limits:
    - Text endpoint:   settings.max_text_length characters (rejected above)
    - File text:       settings.max_file_text_length characters (truncated)
"""

import asyncio
import base64
import io
import logging
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import List, Optional

import pdfplumber

from notebrief.config import settings
from notebrief.exceptions import ExtractionError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "text/plain",
    "text/markdown",
    "application/pdf",
    "image/jpeg",
    "image/png",
}
ALLOWED_EXTENSIONS = (".txt", ".md", ".pdf", ".jpg", ".jpeg", ".png")

TEXT_MIME_TYPES = {"text/plain", "text/markdown"}
TEXT_EXTENSIONS = (".txt", ".md")
PDF_MIME_TYPES = {"application/pdf"}
PDF_EXTENSIONS = (".pdf",)
IMAGE_MIME_TYPES = {"image/jpeg", "image/png"}
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"
PREVIEW_LENGTH = 200

# Firebase-style IDs: alphanumeric, at least 20 characters
USER_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]{20,}$")
_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')


@dataclass(frozen=True)
class PreparedUpload:
    """
    An accepted upload, ready for the summarization pipeline.

    Exactly one of `text` (kind text/pdf) or `image_base64` (kind image) is set.
    """

    kind: str
    original_file_name: str
    mime_type: str
    text: Optional[str] = None
    image_base64: Optional[str] = None
    image_mime_type: Optional[str] = None

    @property
    def is_image(self) -> bool:
        return self.kind == "image"


def sanitize_filename(filename: str) -> str:
    """Keep only the last path component and strip characters unsafe in file names."""
    name = re.split(r"[/\\]", filename)[-1] or filename
    return _UNSAFE_FILENAME_CHARS.sub("", name).strip() or "file"


def _format_count(n: int) -> str:
    # Italian grouping: 50000 → "50.000"
    return f"{n:,}".replace(",", ".")


class DocumentService:
    """Input validation and text extraction for the summarize endpoints."""

    def __init__(
        self,
        max_text_length: Optional[int] = None,
        max_file_text_length: Optional[int] = None,
        max_file_size: Optional[int] = None,
    ):
        self.max_text_length = max_text_length or settings.max_text_length
        self.max_file_text_length = max_file_text_length or settings.max_file_text_length
        self.max_file_size = max_file_size or settings.max_file_size

    # ── Plain request validation ─────────────────────────────────────────

    def validate_user_id(self, user_id: Optional[str]) -> Optional[str]:
        """Return the user ID unchanged, or None when absent. Raises on a malformed ID."""
        if not user_id:
            return None
        if not USER_ID_PATTERN.match(user_id):
            raise ValidationError(
                message="Formato userId non valido",
                field="user_id",
                context={"length": len(user_id)},
            )
        return user_id

    def validate_text(self, text: Optional[str]) -> str:
        """
        Trim and bound-check the text sent to POST /api/summarize.

        Raises:
            ValidationError: missing/blank text, or longer than max_text_length.
        """
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValidationError(message="Campo 'text' obbligatorio", field="text")

        if len(cleaned) > self.max_text_length:
            raise ValidationError(
                message=(
                    "Il testo è troppo lungo. Massimo "
                    f"{_format_count(self.max_text_length)} caratteri."
                ),
                field="text",
                context={"length": len(cleaned), "max_length": self.max_text_length},
            )
        return cleaned

    # ── Upload validation ────────────────────────────────────────────────

    def validate_file_type(self, file_name: str, mime_type: str) -> None:
        lowered = file_name.lower()
        has_allowed_extension = lowered.endswith(ALLOWED_EXTENSIONS)
        has_allowed_type = not mime_type or mime_type in ALLOWED_MIME_TYPES

        if not has_allowed_extension and not has_allowed_type:
            raise ValidationError(
                message=(
                    "Tipo di file non supportato. Sono supportati solo file "
                    ".txt, .md, .pdf, .jpg, .jpeg, .png"
                ),
                field="file",
                context={"file_name": file_name, "mime_type": mime_type},
            )

    def validate_size(self, size: int) -> None:
        if size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File troppo grande. La dimensione massima è {max_mb:.0f}MB",
                field="file",
                context={"size": size, "max_size": self.max_file_size},
            )

    @staticmethod
    def classify(file_name: str, mime_type: str) -> str:
        """Return "text", "pdf" or "image". Raises ValidationError for anything else."""
        lowered = file_name.lower()
        if mime_type in TEXT_MIME_TYPES or lowered.endswith(TEXT_EXTENSIONS):
            return "text"
        if mime_type in PDF_MIME_TYPES or lowered.endswith(PDF_EXTENSIONS):
            return "pdf"
        if mime_type in IMAGE_MIME_TYPES or lowered.endswith(IMAGE_EXTENSIONS):
            return "image"
        raise ValidationError(
            message="Tipo di file non supportato",
            field="file",
            context={"file_name": file_name, "mime_type": mime_type},
        )

    # ── Extraction ───────────────────────────────────────────────────────

    @staticmethod
    def decode_text(content: bytes) -> str:
        text = content.decode("utf-8", errors="replace").strip()
        if not text:
            raise ValidationError(message="Il file è vuoto", field="file")
        return text

    @staticmethod
    def _read_pdf(content: bytes) -> str:
        pages: List[str] = []
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text()
                if page_text:
                    pages.append(page_text)
        return "\n".join(pages)

    async def extract_pdf_text(self, content: bytes) -> str:
        """
        Extract the text layer of a PDF.

        pdfplumber is synchronous and CPU-bound, so it runs in a worker thread.

        Raises:
            ExtractionError: the PDF could not be parsed.
            ValidationError: the PDF parsed but holds no text (e.g. a scan).
        """
        try:
            text = await asyncio.to_thread(self._read_pdf, content)
        except Exception as e:
            logger.error("PDF parsing failed (%d bytes): %s", len(content), e, exc_info=True)
            raise ExtractionError(context={"error_type": type(e).__name__, "error": str(e)})

        text = text.strip()
        if not text:
            raise ValidationError(message="Impossibile estrarre testo dal PDF", field="file")
        return text

    def truncate(self, text: str) -> str:
        if len(text) > self.max_file_text_length:
            logger.info(
                "Extracted text truncated from %d to %d chars",
                len(text),
                self.max_file_text_length,
            )
            return text[: self.max_file_text_length]
        return text

    async def prepare_upload(
        self,
        filename: Optional[str],
        content: bytes,
        mime_type: Optional[str] = None,
    ) -> PreparedUpload:
        """
        Complete upload pipeline: sanitize → type check → size check → extract.

        Returns:
            PreparedUpload holding either the (truncated) text or the base64 image.

        Raises:
            ValidationError: unsupported type, too large, empty, or no PDF text.
            ExtractionError: PDF could not be parsed.
        """
        original_file_name = sanitize_filename(filename or "")
        mime_type = mime_type or ""

        self.validate_file_type(original_file_name, mime_type)
        self.validate_size(len(content))
        kind = self.classify(original_file_name, mime_type)

        logger.info(
            "Upload accepted: name=%s kind=%s mime=%s size=%d",
            original_file_name,
            kind,
            mime_type or "-",
            len(content),
        )

        if kind == "image":
            return PreparedUpload(
                kind=kind,
                original_file_name=original_file_name,
                mime_type=mime_type,
                image_base64=base64.b64encode(content).decode("ascii"),
                image_mime_type=mime_type or DEFAULT_IMAGE_MIME_TYPE,
            )

        if kind == "pdf":
            text = await self.extract_pdf_text(content)
        else:
            text = self.decode_text(content)

        return PreparedUpload(
            kind=kind,
            original_file_name=original_file_name,
            mime_type=mime_type,
            text=self.truncate(text),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
document_service = DocumentService()

"""
NoteBrief Backend: API Endpoint Tests
=======================================

What:  HTTP-level tests through ASGITransport with the summarizer and the
       persistence layer patched at the route modules.

What we test:
    ✅ Success bodies of both summarize endpoints
    ✅ Validation failures → 400 with the Italian message and a request ID
    ✅ Pipeline errors → 503 / 500 with fixed messages, no provider detail
    ✅ Persistence is opt-in and its failure is not fatal
    ✅ History listing, debug models guard, health check
"""

import uuid
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from notebrief.config import settings
from notebrief.database import get_db_session
from notebrief.exceptions import (
    DiscoveryError,
    EmptySummaryError,
    GenerationFailedError,
    GenerationUnavailableError,
    TransportError,
)
from notebrief.services.summary_service import PersistResult, SummaryService

USER = "abcdefghijABCDEFGHIJ0123"


@contextmanager
def patched_pipeline(summary="Un riassunto.", side_effect=None, persist=None):
    """Patch the summarizer and summary_service used by the summarize routes."""
    summarizer = MagicMock()
    summarizer.summarize_text = AsyncMock(return_value=summary, side_effect=side_effect)
    summarizer.summarize_image = AsyncMock(return_value=summary, side_effect=side_effect)

    store = MagicMock()
    store.save_summary = AsyncMock(
        return_value=persist or PersistResult(saved=True, record_id=uuid.uuid4())
    )

    with patch("notebrief.routes.summarize.summarizer", summarizer), \
         patch("notebrief.routes.summarize.summary_service", store):
        yield summarizer, store


class TestSummarizeText:

    @pytest.mark.asyncio
    async def test_anonymous_summary(self, test_client):
        with patched_pipeline() as (summarizer, store):
            response = await test_client.post("/api/summarize", json={"text": "  Testo.  "})

        assert response.status_code == 200
        body = response.json()
        assert body == {"summary": "Un riassunto.", "persisted": False, "record_id": None}
        summarizer.summarize_text.assert_awaited_once_with("Testo.")
        store.save_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_authenticated_summary_is_stored(self, test_client):
        record_id = uuid.uuid4()
        persist = PersistResult(saved=True, record_id=record_id)
        with patched_pipeline(persist=persist) as (_, store):
            response = await test_client.post(
                "/api/summarize", json={"text": "Testo.", "user_id": USER}
            )

        assert response.status_code == 200
        assert response.json()["persisted"] is True
        assert response.json()["record_id"] == str(record_id)
        store.save_summary.assert_awaited_once_with(
            summary="Un riassunto.", source_type="text", user_id=USER, source_file_name=None
        )

    @pytest.mark.asyncio
    async def test_persistence_failure_is_not_fatal(self, test_client):
        persist = PersistResult(saved=False, error="OperationalError")
        with patched_pipeline(persist=persist):
            response = await test_client.post(
                "/api/summarize", json={"text": "Testo.", "user_id": USER}
            )

        assert response.status_code == 200
        assert response.json()["summary"] == "Un riassunto."
        assert response.json()["persisted"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"text": ""}, {"text": "   "}])
    async def test_missing_text(self, test_client, payload):
        with patched_pipeline() as (summarizer, _):
            response = await test_client.post("/api/summarize", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Campo 'text' obbligatorio"
        assert body["request_id"]
        summarizer.summarize_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_text_too_long(self, test_client):
        with patched_pipeline():
            response = await test_client.post(
                "/api/summarize", json={"text": "a" * (settings.max_text_length + 1)}
            )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Il testo è troppo lungo")

    @pytest.mark.asyncio
    async def test_invalid_user_id(self, test_client):
        with patched_pipeline():
            response = await test_client.post(
                "/api/summarize", json={"text": "Testo.", "user_id": "bad id"}
            )

        assert response.status_code == 400
        assert response.json()["message"] == "Formato userId non valido"

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client):
        response = await test_client.post(
            "/api/summarize",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Richiesta non valida"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        with patched_pipeline():
            response = await test_client.post(
                "/api/summarize", json={}, headers={"X-Request-ID": "trace-123"}
            )

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestPipelineErrorMapping:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error, status, message",
        [
            (
                GenerationUnavailableError(http_status=503, provider_status="UNAVAILABLE"),
                503,
                "Servizio AI temporaneamente non disponibile",
            ),
            (
                GenerationFailedError(
                    http_status=400,
                    provider_status="INVALID_ARGUMENT",
                    provider_message="secret provider detail",
                ),
                500,
                "Errore nella generazione del riassunto",
            ),
            (DiscoveryError(), 500, "Errore nella configurazione del modello AI"),
            (TransportError(), 500, "Errore nella generazione del riassunto"),
            (EmptySummaryError(), 500, "Nessun riassunto restituito dal modello"),
        ],
    )
    async def test_error_mapping(self, test_client, error, status, message):
        with patched_pipeline(side_effect=error) as (_, store):
            response = await test_client.post(
                "/api/summarize", json={"text": "Testo.", "user_id": USER}
            )

        assert response.status_code == status
        body = response.json()
        assert body["message"] == message
        assert set(body) == {"error", "message", "request_id"}
        assert "secret provider detail" not in response.text
        store.save_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error(self, test_client):
        with patched_pipeline(side_effect=RuntimeError("kaboom")):
            response = await test_client.post("/api/summarize", json={"text": "Testo."})

        assert response.status_code == 500
        assert response.json()["message"] == "Errore interno del server"
        assert "kaboom" not in response.text


class TestUploadAndSummarize:

    @pytest.mark.asyncio
    async def test_text_file(self, test_client):
        content = ("Riga " * 100).encode("utf-8")
        with patched_pipeline() as (summarizer, store):
            response = await test_client.post(
                "/api/upload-and-summarize",
                files={"file": ("../appunti.txt", content, "text/plain")},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == "Un riassunto."
        assert body["original_file_name"] == "appunti.txt"
        assert body["mime_type"] == "text/plain"
        assert body["extracted_text_preview"] == content.decode().strip()[:200]
        assert body["persisted"] is False
        summarizer.summarize_text.assert_awaited_once()
        store.save_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_image_file_with_user(self, test_client):
        with patched_pipeline(summary="Testo letto dall'immagine.") as (summarizer, store):
            response = await test_client.post(
                "/api/upload-and-summarize",
                files={"file": ("foto.png", b"\x89PNG\r\n\x1a\n", "image/png")},
                data={"user_id": USER},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["extracted_text_preview"] == "Testo letto dall'immagine."
        assert body["persisted"] is True
        summarizer.summarize_image.assert_awaited_once_with("iVBORw0KGgo=", "image/png")
        summarizer.summarize_text.assert_not_awaited()
        store.save_summary.assert_awaited_once_with(
            summary="Testo letto dall'immagine.",
            source_type="file",
            user_id=USER,
            source_file_name="foto.png",
        )

    @pytest.mark.asyncio
    async def test_no_file(self, test_client):
        with patched_pipeline():
            response = await test_client.post(
                "/api/upload-and-summarize", data={"user_id": USER}
            )

        assert response.status_code == 400
        assert response.json()["message"] == "Nessun file caricato"

    @pytest.mark.asyncio
    async def test_unsupported_type(self, test_client):
        with patched_pipeline() as (summarizer, _):
            response = await test_client.post(
                "/api/upload-and-summarize",
                files={"file": ("archive.zip", b"PK\x03\x04", "application/zip")},
            )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Tipo di file non supportato")
        summarizer.summarize_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_text_file(self, test_client):
        with patched_pipeline():
            response = await test_client.post(
                "/api/upload-and-summarize",
                files={"file": ("vuoto.txt", b"   ", "text/plain")},
            )

        assert response.status_code == 400
        assert response.json()["message"] == "Il file è vuoto"

    @pytest.mark.asyncio
    async def test_corrupt_pdf(self, test_client):
        with patched_pipeline():
            response = await test_client.post(
                "/api/upload-and-summarize",
                files={"file": ("rotto.pdf", b"not a pdf at all", "application/pdf")},
            )

        assert response.status_code == 500
        assert response.json()["message"] == "Errore nell'elaborazione del PDF"

    @pytest.mark.asyncio
    async def test_image_unavailable(self, test_client):
        error = GenerationUnavailableError(http_status=503, provider_status="UNAVAILABLE")
        with patched_pipeline(side_effect=error):
            response = await test_client.post(
                "/api/upload-and-summarize",
                files={"file": ("foto.jpg", b"\xff\xd8\xff", "image/jpeg")},
            )

        assert response.status_code == 503


class TestSummaryHistory:

    @pytest.mark.asyncio
    async def test_lists_user_summaries(self, test_client, session_factory):
        from notebrief.main import app

        async def override_session():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db_session] = override_session

        service = SummaryService(session_factory=session_factory)
        await service.save_summary(summary="primo", source_type="text", user_id=USER)
        await service.save_summary(
            summary="secondo", source_type="file", user_id=USER, source_file_name="a.pdf"
        )

        response = await test_client.get("/api/summaries", params={"user_id": USER})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert {s["summary"] for s in body["summaries"]} == {"primo", "secondo"}
        assert all(s["session_type"] == "authenticated" for s in body["summaries"])

    @pytest.mark.asyncio
    async def test_invalid_user_id(self, test_client, mock_db_session):
        from notebrief.main import app

        async def override_session():
            yield mock_db_session

        app.dependency_overrides[get_db_session] = override_session

        response = await test_client.get("/api/summaries", params={"user_id": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "Formato userId non valido"


class TestDebugModels:

    @pytest.mark.asyncio
    async def test_disabled_in_production(self, test_client):
        with patch.object(settings, "environment", "production"):
            response = await test_client.get("/api/debug/models")

        assert response.status_code == 403
        assert response.json()["message"] == "Non disponibile in produzione"

    @pytest.mark.asyncio
    async def test_proxies_listing(self, test_client):
        listing = {"models": [{"name": "models/gemini-2.0-flash"}]}
        client = MagicMock()
        client.list_models = AsyncMock(return_value=httpx.Response(200, json=listing))

        with patch("notebrief.routes.models.gemini_client", client):
            response = await test_client.get("/api/debug/models")

        assert response.status_code == 200
        assert response.json() == listing

    @pytest.mark.asyncio
    async def test_listing_failure(self, test_client):
        client = MagicMock()
        client.list_models = AsyncMock(return_value=httpx.Response(401, text="denied"))

        with patch("notebrief.routes.models.gemini_client", client):
            response = await test_client.get("/api/debug/models")

        assert response.status_code == 500
        assert response.json()["message"] == "Errore nella configurazione del modello AI"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        summarizer = MagicMock()
        summarizer.health_check = AsyncMock(return_value=True)

        with patch("notebrief.routes.health.summarizer", summarizer):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["gemini"] == "available"

    @pytest.mark.asyncio
    async def test_degraded_without_gemini(self, test_client):
        summarizer = MagicMock()
        summarizer.health_check = AsyncMock(return_value=False)

        with patch("notebrief.routes.health.summarizer", summarizer):
            response = await test_client.get("/health")

        assert response.json()["status"] == "degraded"
        assert response.json()["gemini"] == "unavailable"

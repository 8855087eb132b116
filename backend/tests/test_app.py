"""
NoteBrief Backend: Application & Configuration Tests
======================================================

What we test:
    ✅ Startup refuses to run without a Gemini API key
    ✅ Shutdown closes the HTTP client and the database engine
    ✅ Settings validators (environment, retry schedule, log level)
"""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from notebrief.config import Settings, settings
from notebrief.main import app, lifespan


class TestLifespan:

    @pytest.mark.asyncio
    async def test_missing_api_key_is_fatal(self):
        with patch("notebrief.main.setup_logging"), \
             patch.object(settings, "gemini_api_key", ""):
            with pytest.raises(ValueError, match="GEMINI_API_KEY"):
                async with lifespan(app):
                    pass

    @pytest.mark.asyncio
    async def test_shutdown_releases_resources(self):
        with patch("notebrief.main.setup_logging"), \
             patch("notebrief.main.gemini_client") as mock_client, \
             patch("notebrief.main.dispose_engine", new_callable=AsyncMock) as mock_dispose:
            mock_client.aclose = AsyncMock()

            async with lifespan(app):
                mock_client.aclose.assert_not_awaited()

        mock_client.aclose.assert_awaited_once()
        mock_dispose.assert_awaited_once()


class TestSettings:

    def test_defaults(self):
        s = Settings(_env_file=None, gemini_api_key="k")
        assert s.retry_max_attempts == 3
        assert s.retry_delays_ms == [0, 500, 1500]
        assert s.gemini_model_prefix == "models/gemini-"
        assert s.max_file_text_length == 10_000

    def test_environment_normalized(self):
        s = Settings(_env_file=None, environment="PRODUCTION")
        assert s.is_production

    def test_unknown_environment(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, environment="staging")

    def test_empty_retry_schedule(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, retry_delays_ms=[])

    def test_negative_retry_delay(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, retry_delays_ms=[0, -1])

    def test_log_level(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="LOUD")

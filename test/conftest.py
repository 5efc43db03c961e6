from __future__ import annotations

from typing import Iterable, Optional

import httpx
import pytest
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from autoagents.core.config import get_settings


class TestSettings(BaseSettings):
    """Test configuration loaded from ``test/.env`` or the environment.

    Live tests talk to a real provider and are skipped unless
    ``AUTOAGENTS_TEST_ENABLE_LIVE_TESTS=true`` and a model is configured.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOAGENTS_TEST_",
        env_file="test/.env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enable_live_tests: bool = Field(default=False, description="Run tests against a real LLM provider")
    live_model: Optional[str] = Field(default=None, description="Pydantic AI model identifier for live tests")


@pytest.fixture(scope="session")
def test_config() -> TestSettings:
    """Fixture providing test configuration from Pydantic settings model."""
    return TestSettings()


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop the cached ``Settings`` so environment patches of a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch, test_config: TestSettings):
    if test_config.enable_live_tests:
        yield
        return

    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
    yield

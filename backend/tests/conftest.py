"""
Shared pytest fixtures for the VulnSweep test suite.

Provides tightened settings and a FastAPI test application whose quota
limiter and settings are isolated per test.  Plain helpers for canned
responses live in ``support.py``.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vulnsweep.config import Settings


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture()
def settings() -> Settings:
    """Return settings with short timeouts so slow paths fail fast."""
    return Settings(
        SCAN_FETCH_TIMEOUT=2.0,
        CRAWL_FETCH_TIMEOUT=2.0,
        ASYNC_PROBE_TIMEOUT=0.5,
        DNS_TIMEOUT=0.2,
        PROBE_HTTPS_TIMEOUT=0.5,
        PROBE_HTTP_TIMEOUT=0.3,
        QUOTA_SCAN_MAX_REQUESTS=3,
        QUOTA_SCAN_WINDOW_SECONDS=60,
    )


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def test_app(settings: Settings):
    """Return the application with settings and the quota limiter overridden.

    Each test gets a fresh :class:`QuotaLimiter`, so quota state never leaks
    between tests.
    """
    from vulnsweep.api.deps import get_quota_limiter
    from vulnsweep.config import get_settings
    from vulnsweep.core.quota import QuotaLimiter
    from vulnsweep.main import create_app

    app = create_app()
    limiter = QuotaLimiter()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_quota_limiter] = lambda: limiter

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Yield an httpx.AsyncClient wired to the test FastAPI app."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

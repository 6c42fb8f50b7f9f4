"""
Shared FastAPI dependency functions for the VulnSweep API.

Provides the quota gate and the engine components used by the scan routes.
Tests swap any of them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request, Response

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.errors import QuotaExceededError
from vulnsweep.core.quota import QuotaDecision, QuotaLimiter, QuotaLimits
from vulnsweep.engine.crawler import LinkDiscoverer
from vulnsweep.engine.orchestrator import CrawlOrchestrator
from vulnsweep.engine.page_scanner import PageScanner
from vulnsweep.engine.subdomains import SubdomainReconnaissance

_quota_limiter = QuotaLimiter()


def get_quota_limiter() -> QuotaLimiter:
    """Return the process-wide quota limiter."""
    return _quota_limiter


def client_identity(request: Request) -> str:
    """Best-effort requester identity used as the quota key suffix."""
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def quota_headers(decision: QuotaDecision) -> dict[str, str]:
    """Rate-limit headers describing *decision*."""
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(int(decision.resets_at.timestamp())),
    }


def enforce_quota(kind: str) -> Callable[..., QuotaDecision]:
    """Build a dependency that charges one *kind* request to the caller.

    Usage::

        @router.post("/crawl")
        async def crawl(
            decision: QuotaDecision = Depends(enforce_quota("crawl")),
        ) -> ...:
            ...

    Raises:
        QuotaExceededError: When the caller's window is exhausted.  The
            application maps it to *429 Too Many Requests*.
    """

    def dependency(
        request: Request,
        response: Response,
        limiter: QuotaLimiter = Depends(get_quota_limiter),
        settings: Settings = Depends(get_settings),
    ) -> QuotaDecision:
        key = f"{kind}:{client_identity(request)}"
        decision = limiter.check(
            key,
            QuotaLimits(
                max_requests=settings.QUOTA_SCAN_MAX_REQUESTS,
                window_seconds=settings.QUOTA_SCAN_WINDOW_SECONDS,
            ),
        )
        if not decision.allowed:
            raise QuotaExceededError(key, decision)
        response.headers.update(quota_headers(decision))
        return decision

    return dependency


def get_page_scanner(settings: Settings = Depends(get_settings)) -> PageScanner:
    return PageScanner(settings=settings)


def get_crawl_orchestrator(
    settings: Settings = Depends(get_settings),
) -> CrawlOrchestrator:
    return CrawlOrchestrator(settings=settings)


def get_link_discoverer(settings: Settings = Depends(get_settings)) -> LinkDiscoverer:
    """Discovery-only crawler with its own, larger page cap."""
    return LinkDiscoverer(max_pages=settings.DISCOVER_MAX_PAGES, settings=settings)


def get_subdomain_recon(
    settings: Settings = Depends(get_settings),
) -> SubdomainReconnaissance:
    return SubdomainReconnaissance(settings=settings)

"""
VulnSweep FastAPI application entry point.

Creates and configures the FastAPI app with:
- CORS middleware
- Security headers middleware
- API v1 router
- Error handlers for unreachable targets and exhausted quotas
- Health check endpoint
- Lifespan hook that configures structured logging
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from vulnsweep.api.deps import quota_headers
from vulnsweep.api.v1.router import router as v1_router
from vulnsweep.config import get_settings
from vulnsweep.core.errors import QuotaExceededError, TargetUnreachableError
from vulnsweep.core.logging import configure_logging, get_logger

# ── Constants ────────────────────────────────────────────────────────────────

_HEALTH_CHECK_PATH: str = "/health"

_SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), camera=(), microphone=()",
}

logger = get_logger(__name__)


# ── Security Headers Middleware ──────────────────────────────────────────────

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that injects security-related HTTP response headers.

    Every outgoing response receives the headers in ``_SECURITY_HEADERS``.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response: Response = await call_next(request)
        for header_name, header_value in _SECURITY_HEADERS.items():
            response.headers[header_name] = header_value
        return response


# ── Error Handlers ───────────────────────────────────────────────────────────

async def target_unreachable_handler(
    request: Request, exc: TargetUnreachableError
) -> JSONResponse:
    """Map an unreachable single-scan target to *422 Unprocessable Entity*."""
    logger.info(
        "Target unreachable: %s",
        exc.reason,
        extra={"action": "target_unreachable", "target": exc.url},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": f"Could not reach {exc.url}: {exc.reason}"},
    )


async def quota_exceeded_handler(
    request: Request, exc: QuotaExceededError
) -> JSONResponse:
    """Map an exhausted quota to *429 Too Many Requests* with reset hints."""
    decision = exc.decision
    headers = quota_headers(decision)
    headers["Retry-After"] = str(decision.retry_after_seconds())
    logger.warning(
        "Quota exceeded",
        extra={"action": "quota_exceeded", "target": exc.key},
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": "Scan quota exceeded, try again later.",
            "resetsAt": decision.resets_at.isoformat(),
        },
        headers=headers,
    )


# ── Lifespan ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup and log the shutdown."""
    settings = get_settings()
    configure_logging()
    logger.info(
        "Application starting",
        extra={"action": "startup", "target": settings.APP_NAME},
    )
    yield
    logger.info(
        "Application shutting down",
        extra={"action": "shutdown", "target": settings.APP_NAME},
    )


# ── Application Factory ─────────────────────────────────────────────────────

def create_app() -> FastAPI:
    """Build and return the configured FastAPI application instance.

    Returns:
        A fully configured ``FastAPI`` app ready to serve requests.
    """
    settings = get_settings()

    application = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Bounded security reconnaissance -- single-page scans, "
            "same-host crawls, and subdomain discovery."
        ),
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Middleware (order matters: outermost first) ───────────────────────

    application.add_middleware(SecurityHeadersMiddleware)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
        ],
        max_age=600,
    )

    # ── Error handlers ───────────────────────────────────────────────────

    application.add_exception_handler(TargetUnreachableError, target_unreachable_handler)
    application.add_exception_handler(QuotaExceededError, quota_exceeded_handler)

    # ── Routers ──────────────────────────────────────────────────────────

    application.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    # ── Health Check ─────────────────────────────────────────────────────

    @application.get(
        _HEALTH_CHECK_PATH,
        tags=["health"],
        summary="Application health check",
        response_class=JSONResponse,
    )
    async def health_check() -> dict[str, Any]:
        """Return the current health status of the application.

        Returns:
            A JSON object with ``status``, ``app``, ``version``, and
            ``timestamp`` fields.
        """
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return application


# ── Module-Level App Instance ────────────────────────────────────────────────

app: FastAPI = create_app()

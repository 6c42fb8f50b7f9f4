"""
VulnSweep application configuration.

Loads settings from environment variables with sensible defaults for local
development.  Uses Pydantic BaseSettings so every value can be overridden via
an environment variable or a ``.env`` file placed next to the backend root.

Every scan limit (body ceilings, page caps, timeouts, batch sizes) lives here
and is handed to the engine components explicitly, so tests and callers can
tighten or relax a single budget without touching module globals.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_MIB: int = 1024 * 1024


class Settings(BaseSettings):
    """Central configuration for the VulnSweep backend.

    All attributes can be overridden through environment variables of the same
    name (case-insensitive).  For example, set ``CRAWL_MAX_PAGES`` in the shell
    or in a ``.env`` file to change the crawl page cap.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────────────────────
    APP_NAME: str = "VulnSweep"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    # ── CORS ────────────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # ── Single-page scan ────────────────────────────────────────────────────
    SCAN_FETCH_TIMEOUT: float = 15.0
    SCAN_MAX_BODY_BYTES: int = 1 * _MIB
    CHECK_BODY_MAX_CHARS: int = 1_000_000
    ASYNC_PROBE_TIMEOUT: float = 15.0

    # ── Crawl / link discovery ──────────────────────────────────────────────
    CRAWL_MAX_PAGES: int = 15
    CRAWL_FETCH_TIMEOUT: float = 8.0
    CRAWL_MAX_BODY_BYTES: int = 1 * _MIB
    DISCOVER_MAX_PAGES: int = 20

    # ── Subdomain reconnaissance ────────────────────────────────────────────
    OSINT_TIMEOUT: float = 10.0
    PASSIVE_CANDIDATE_CAP: int = 100
    DNS_BATCH_SIZE: int = 50
    DNS_TIMEOUT: float = 3.0
    PASSIVE_PROBE_CONCURRENCY: int = 20
    BRUTE_PROBE_CONCURRENCY: int = 30
    PROBE_HTTPS_TIMEOUT: float = 5.0
    PROBE_HTTP_TIMEOUT: float = 3.0

    # ── Quota gate ──────────────────────────────────────────────────────────
    QUOTA_SCAN_MAX_REQUESTS: int = 10
    QUOTA_SCAN_WINDOW_SECONDS: int = 60

    # ── Validators ──────────────────────────────────────────────────────────

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: object) -> list[str]:
        """Accept a comma-separated string *or* an actual list."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return list(value)  # type: ignore[arg-type]

    @model_validator(mode="after")
    def check_probe_budgets(self) -> "Settings":
        """Reject HTTP fallback budgets that exceed the HTTPS budget."""
        if self.PROBE_HTTP_TIMEOUT > self.PROBE_HTTPS_TIMEOUT:
            raise ValueError(
                "PROBE_HTTP_TIMEOUT must not exceed PROBE_HTTPS_TIMEOUT."
            )
        return self

    # ── Derived values ──────────────────────────────────────────────────────

    @property
    def scanner_user_agent(self) -> str:
        """User agent sent with single-page scan requests."""
        return f"{self.APP_NAME}/1.0 (Security Scanner)"

    @property
    def crawler_user_agent(self) -> str:
        """User agent sent while discovering links."""
        return f"{self.APP_NAME}/1.0 (Crawler)"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings.

    Using ``lru_cache`` ensures the ``.env`` file is read only once and the
    same ``Settings`` instance is reused across the entire process.
    """
    return Settings()

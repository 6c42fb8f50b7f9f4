"""
Pydantic v2 schemas for scan, crawl, and discovery requests and responses.

Response fields use camelCase aliases on the wire (``scannedAt``,
``responseHeaders``, ``statusCode``...).  ``populate_by_name`` lets the
route handlers build them with the snake_case field names.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vulnsweep.api.schemas.finding import FindingResponse, SeveritySummary

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})
_MAX_URL_LENGTH: int = 2048

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ScanRequest(BaseModel):
    """Payload for ``POST /api/v1/scan``, ``/scan/crawl/discover`` and
    ``/scan/discover``.

    Attributes:
        url: Absolute ``http`` or ``https`` URL of the target.
    """

    url: str = Field(
        ...,
        min_length=8,
        max_length=_MAX_URL_LENGTH,
        examples=["https://example.com"],
        description="Absolute http(s) URL to scan.",
    )

    @field_validator("url", mode="after")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Ensure *url* is an absolute http(s) URL with a host.

        Raises:
            ValueError: If the scheme is not http/https or the host is missing.
        """
        cleaned = value.strip()
        try:
            parts = urlsplit(cleaned)
            hostname = parts.hostname
        except ValueError as exc:
            raise ValueError(f"'{cleaned}' is not a valid URL.") from exc
        if parts.scheme.lower() not in _ALLOWED_SCHEMES or not hostname:
            raise ValueError(
                f"'{cleaned}' must be an absolute http:// or https:// URL."
            )
        return cleaned


class CrawlRequest(ScanRequest):
    """Payload for ``POST /api/v1/scan/crawl``.

    Attributes:
        urls: Optional pre-selected pages to scan instead of running link
            discovery.  Non-http(s) entries are ignored and the list is
            capped at the crawl page limit.
    """

    urls: Optional[list[str]] = Field(
        default=None,
        description="Pre-selected pages; discovery runs when omitted.",
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ScanResponse(BaseModel):
    """Result of a single-page scan (or the merged view of a crawl)."""

    url: str
    scanned_at: datetime = Field(alias="scannedAt")
    findings: list[FindingResponse] = Field(default_factory=list)
    summary: SeveritySummary = Field(default_factory=SeveritySummary)
    duration: int = Field(0, description="Wall-clock duration in milliseconds.")
    response_headers: dict[str, str] = Field(
        default_factory=dict, alias="responseHeaders"
    )

    model_config = ConfigDict(populate_by_name=True)


class CrawlPage(BaseModel):
    """Per-page breakdown entry inside a crawl response."""

    url: str
    findings: list[FindingResponse] = Field(default_factory=list)
    findings_count: int = 0
    summary: SeveritySummary = Field(default_factory=SeveritySummary)
    duration: int = 0


class CrawlStats(BaseModel):
    """Crawl bookkeeping attached to :class:`CrawlResponse`."""

    pages_discovered: int = Field(0, alias="pagesDiscovered")
    pages_scanned: int = Field(0, alias="pagesScanned")
    pages: list[CrawlPage] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class CrawlResponse(ScanResponse):
    """Merged crawl result: the single-scan shape plus a ``crawl`` block."""

    crawl: CrawlStats


class DiscoveredUrlsResponse(BaseModel):
    """Result of ``POST /api/v1/scan/crawl/discover``."""

    urls: list[str] = Field(default_factory=list)


class SubdomainResponse(BaseModel):
    """A verified subdomain with its provenance."""

    subdomain: str
    url: str
    reachable: bool
    status_code: Optional[int] = Field(None, alias="statusCode")
    sources: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SubdomainReportResponse(BaseModel):
    """Result of ``POST /api/v1/scan/discover``."""

    domain: str
    total: int
    reachable: int
    subdomains: list[SubdomainResponse] = Field(default_factory=list)
    sources: dict[str, int] = Field(default_factory=dict)

"""
Pydantic v2 schemas for the VulnSweep REST API.

Re-exports every public schema so consumers can do::

    from vulnsweep.api.schemas import ScanRequest, ScanResponse  # etc.
"""

from vulnsweep.api.schemas.finding import FindingResponse, SeveritySummary
from vulnsweep.api.schemas.scan import (
    CrawlPage,
    CrawlRequest,
    CrawlResponse,
    CrawlStats,
    DiscoveredUrlsResponse,
    ScanRequest,
    ScanResponse,
    SubdomainReportResponse,
    SubdomainResponse,
)

__all__: list[str] = [
    # finding
    "FindingResponse",
    "SeveritySummary",
    # scan
    "ScanRequest",
    "CrawlRequest",
    "ScanResponse",
    "CrawlPage",
    "CrawlStats",
    "CrawlResponse",
    "DiscoveredUrlsResponse",
    "SubdomainResponse",
    "SubdomainReportResponse",
]

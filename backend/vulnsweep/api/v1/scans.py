"""
Scan endpoints.

Four synchronous request/response routes, each gated by the quota
dependency before any network work begins:

* ``POST /scan``                 -- scan a single URL.
* ``POST /scan/crawl``           -- discover same-host pages and scan each.
* ``POST /scan/crawl/discover``  -- discovery only, returns the URL list.
* ``POST /scan/discover``        -- passive + brute-force subdomain discovery.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from vulnsweep.api.deps import (
    enforce_quota,
    get_crawl_orchestrator,
    get_link_discoverer,
    get_page_scanner,
    get_subdomain_recon,
)
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
from vulnsweep.core.quota import QuotaDecision
from vulnsweep.engine.crawler import LinkDiscoverer
from vulnsweep.engine.orchestrator import CrawlOrchestrator
from vulnsweep.engine.page_scanner import PageScanner
from vulnsweep.engine.subdomains import SubdomainReconnaissance

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ScanResponse,
    status_code=status.HTTP_200_OK,
    summary="Scan a single URL",
    responses={
        422: {"description": "Invalid URL or target unreachable."},
        429: {"description": "Scan quota exceeded."},
    },
)
async def scan_url(
    payload: ScanRequest,
    _quota: QuotaDecision = Depends(enforce_quota("scan")),
    scanner: PageScanner = Depends(get_page_scanner),
) -> ScanResponse:
    """Fetch *url*, run the check battery, and return its findings.

    Raises:
        TargetUnreachableError: Mapped to *422* by the application.
    """
    result = await scanner.scan_or_raise(payload.url)

    return ScanResponse(
        url=result.url,
        scanned_at=datetime.now(timezone.utc),
        findings=[FindingResponse.from_finding(f) for f in result.findings],
        summary=SeveritySummary(**result.summary),
        duration=result.duration_ms,
        response_headers=result.response_headers,
    )


@router.post(
    "/crawl",
    response_model=CrawlResponse,
    status_code=status.HTTP_200_OK,
    summary="Crawl same-host pages and scan each",
)
async def crawl_url(
    payload: CrawlRequest,
    _quota: QuotaDecision = Depends(enforce_quota("crawl")),
    orchestrator: CrawlOrchestrator = Depends(get_crawl_orchestrator),
) -> CrawlResponse:
    """Scan up to the page cap and return the merged, deduplicated view.

    Unreachable pages contribute an empty entry; the crawl itself never
    fails because of a dead page.
    """
    result = await orchestrator.crawl(payload.url, urls=payload.urls)

    pages = [
        CrawlPage(
            url=page["url"],
            findings=[FindingResponse(**f) for f in page["findings"]],
            findings_count=page["findings_count"],
            summary=SeveritySummary(**page["summary"]),
            duration=page["duration"],
        )
        for page in result.pages_breakdown()
    ]

    return CrawlResponse(
        url=result.entry_url,
        scanned_at=datetime.now(timezone.utc),
        findings=[FindingResponse.from_finding(f) for f in result.merged_findings],
        summary=SeveritySummary(**result.merged_summary),
        duration=result.duration_ms,
        response_headers=result.response_headers,
        crawl=CrawlStats(
            pages_discovered=result.pages_discovered,
            pages_scanned=len(result.pages_scanned),
            pages=pages,
        ),
    )


@router.post(
    "/crawl/discover",
    response_model=DiscoveredUrlsResponse,
    status_code=status.HTTP_200_OK,
    summary="List same-host pages without scanning them",
)
async def discover_urls(
    payload: ScanRequest,
    _quota: QuotaDecision = Depends(enforce_quota("crawl-discover")),
    discoverer: LinkDiscoverer = Depends(get_link_discoverer),
) -> DiscoveredUrlsResponse:
    """Run link discovery only; the entry URL is always the first entry."""
    urls = await discoverer.discover(payload.url)
    return DiscoveredUrlsResponse(urls=urls)


@router.post(
    "/discover",
    response_model=SubdomainReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Discover subdomains of the target's root domain",
)
async def discover_subdomains(
    payload: ScanRequest,
    _quota: QuotaDecision = Depends(enforce_quota("subdomains")),
    recon: SubdomainReconnaissance = Depends(get_subdomain_recon),
) -> SubdomainReportResponse:
    """Query OSINT sources and a brute-force dictionary, verify, and rank."""
    report = await recon.discover(payload.url)

    logger.info(
        "Subdomain report for %s: %d found, %d reachable",
        report.domain,
        report.total,
        report.reachable,
    )

    return SubdomainReportResponse(
        domain=report.domain,
        total=report.total,
        reachable=report.reachable,
        subdomains=[
            SubdomainResponse(
                subdomain=sub.subdomain,
                url=sub.url,
                reachable=sub.reachable,
                status_code=sub.status_code,
                sources=list(sub.sources),
            )
            for sub in report.subdomains
        ],
        sources=report.source_counts,
    )

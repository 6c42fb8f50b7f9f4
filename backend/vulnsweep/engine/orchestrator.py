"""
Crawl Orchestrator for VulnSweep.

Coordinates a multi-page scan:

1. Discover same-host pages from the entry URL once (or accept a
   pre-selected list of URLs from the caller).
2. Scan each page **sequentially** -- one page's fetch and check cycle
   completes before the next begins.  This keeps the load on the target
   polite and the per-crawl state single-writer.
3. Merge findings across pages, keeping the first occurrence of each id,
   and recompute the rollup summary.

Parallelising step 2 is a latency win, but the merge must then be done
over results collected in discovery order to keep "first occurrence wins"
deterministic.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence
from urllib.parse import urlsplit

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.logging import get_logger
from vulnsweep.engine.crawler import LinkDiscoverer
from vulnsweep.engine.findings import Finding, empty_summary, merge_findings, summarize
from vulnsweep.engine.page_scanner import PageScanner, PageScanResult

logger = get_logger(__name__)


@dataclass
class CrawlResult:
    """Aggregated outcome of a crawl.

    Attributes:
        entry_url:        The URL the crawl started from.
        pages_discovered: Number of URLs selected for scanning.
        pages_scanned:    Per-page results in scan order.
        merged_findings:  Findings deduplicated by id, severity-sorted.
        merged_summary:   Summary over ``merged_findings``.
        duration_ms:      Wall-clock time of the whole crawl.
    """

    entry_url: str
    pages_discovered: int = 0
    pages_scanned: list[PageScanResult] = field(default_factory=list)
    merged_findings: list[Finding] = field(default_factory=list)
    merged_summary: dict[str, int] = field(default_factory=empty_summary)
    duration_ms: int = 0

    @property
    def response_headers(self) -> dict[str, str]:
        """Headers of the first scanned page (the entry page)."""
        if not self.pages_scanned:
            return {}
        return self.pages_scanned[0].response_headers

    def pages_breakdown(self) -> list[dict[str, Any]]:
        """Per-page view: url, findings, findings_count, summary, duration."""
        return [
            {
                "url": page.url,
                "findings": [finding.to_dict() for finding in page.findings],
                "findings_count": page.summary["total"],
                "summary": dict(page.summary),
                "duration": page.duration_ms,
            }
            for page in self.pages_scanned
        ]


def _is_http_url(url: object) -> bool:
    if not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


class CrawlOrchestrator:
    """Discover pages, scan them one by one, and merge the results.

    Usage::

        orchestrator = CrawlOrchestrator()
        result = await orchestrator.crawl("https://example.com")
    """

    def __init__(
        self,
        discoverer: Optional[LinkDiscoverer] = None,
        scanner: Optional[PageScanner] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        self.discoverer: LinkDiscoverer = discoverer or LinkDiscoverer(settings=self.settings)
        self.scanner: PageScanner = scanner or PageScanner(settings=self.settings)

    async def crawl(
        self, entry_url: str, urls: Optional[Sequence[str]] = None
    ) -> CrawlResult:
        """Run the full crawl pipeline for *entry_url*.

        Args:
            entry_url: Starting page.
            urls:      Optional pre-selected pages.  Invalid entries are
                       dropped and the list is capped at the page limit;
                       when nothing valid remains, discovery runs instead.

        Returns:
            A :class:`CrawlResult`.
        """
        start = time.monotonic()
        logger.info(
            "Starting crawl",
            extra={"action": "crawl_start", "target": entry_url},
        )

        pages = self._select_pages(urls)
        if not pages:
            pages = await self.discoverer.discover(entry_url)

        page_results: list[PageScanResult] = []
        for page_url in pages:
            page_results.append(await self.scanner.scan(page_url))

        merged = merge_findings(page.findings for page in page_results)
        result = CrawlResult(
            entry_url=entry_url,
            pages_discovered=len(pages),
            pages_scanned=page_results,
            merged_findings=merged,
            merged_summary=summarize(merged),
            duration_ms=int((time.monotonic() - start) * 1000),
        )

        logger.info(
            "Crawl completed: %d pages, %d unique findings in %dms",
            len(page_results),
            result.merged_summary["total"],
            result.duration_ms,
            extra={"action": "crawl_completed", "target": entry_url},
        )
        return result

    def _select_pages(self, urls: Optional[Sequence[str]]) -> list[str]:
        if not urls:
            return []
        valid = [url for url in urls if _is_http_url(url)]
        return valid[: self.settings.CRAWL_MAX_PAGES]

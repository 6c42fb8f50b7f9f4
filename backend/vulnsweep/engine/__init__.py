"""VulnSweep scan engine - page scans, crawls, and subdomain discovery."""

from vulnsweep.engine.findings import Finding, Severity, merge_findings, sort_findings, summarize
from vulnsweep.engine.checks import CheckRunner
from vulnsweep.engine.page_scanner import PageScanner, PageScanResult
from vulnsweep.engine.crawler import LinkDiscoverer
from vulnsweep.engine.orchestrator import CrawlOrchestrator, CrawlResult
from vulnsweep.engine.subdomains import (
    DiscoveredSubdomain,
    SubdomainReconnaissance,
    SubdomainReport,
)

__all__ = [
    "Finding",
    "Severity",
    "merge_findings",
    "sort_findings",
    "summarize",
    "CheckRunner",
    "PageScanner",
    "PageScanResult",
    "LinkDiscoverer",
    "CrawlOrchestrator",
    "CrawlResult",
    "DiscoveredSubdomain",
    "SubdomainReconnaissance",
    "SubdomainReport",
]

"""
Page scanner: fetch one URL and run the check battery against it.

:meth:`PageScanner.scan` fails open -- a target that cannot be fetched
yields an empty result tagged ``reachable=False`` -- so crawls keep going
past dead pages.  :meth:`PageScanner.scan_or_raise` is the strict variant
used by the single-URL entry point, where an unreachable target is an
error the caller must see.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.errors import TargetUnreachableError
from vulnsweep.core.logging import get_logger
from vulnsweep.engine.body import read_bounded_body
from vulnsweep.engine.checks import CheckRunner
from vulnsweep.engine.findings import Finding, empty_summary, summarize

logger = get_logger(__name__)


@dataclass
class PageScanResult:
    """Outcome of scanning a single page.

    Attributes:
        url:              The URL that was scanned.
        findings:         Severity-sorted findings.
        summary:          Count per severity plus ``total``.
        duration_ms:      Wall-clock time spent on the page.
        response_headers: Flat map of response headers (lowercase names).
        reachable:        ``False`` when the fetch itself failed.
    """

    url: str
    findings: list[Finding] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=empty_summary)
    duration_ms: int = 0
    response_headers: dict[str, str] = field(default_factory=dict)
    reachable: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "findings": [finding.to_dict() for finding in self.findings],
            "summary": dict(self.summary),
            "duration": self.duration_ms,
            "responseHeaders": dict(self.response_headers),
        }


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class PageScanner:
    """Fetch a page with the scanner user agent and evaluate it.

    Attributes:
        runner:    The :class:`CheckRunner` applied to each fetched page.
        settings:  Source of ``SCAN_FETCH_TIMEOUT`` and
                   ``SCAN_MAX_BODY_BYTES``.
        transport: Optional httpx transport (tests inject a mock).
    """

    def __init__(
        self,
        runner: Optional[CheckRunner] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        self.runner: CheckRunner = runner or CheckRunner(settings=self.settings)
        self.transport = transport

    async def scan(self, url: str) -> PageScanResult:
        """Scan *url*; never raises.

        Returns:
            A :class:`PageScanResult`.  When the fetch fails the result has
            no findings, a zero summary, and the time spent trying.
        """
        start = time.monotonic()
        try:
            return await self._scan(url, start)
        except TargetUnreachableError as exc:
            logger.info(
                "Page unreachable, skipping checks: %s",
                exc.reason,
                extra={"action": "page_unreachable", "target": url},
            )
            return PageScanResult(
                url=url,
                duration_ms=_elapsed_ms(start),
                reachable=False,
            )

    async def scan_or_raise(self, url: str) -> PageScanResult:
        """Scan *url*, raising :class:`TargetUnreachableError` on fetch failure."""
        return await self._scan(url, time.monotonic())

    async def _scan(self, url: str, start: float) -> PageScanResult:
        timeout = self.settings.SCAN_FETCH_TIMEOUT

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            response = await self._fetch(client, url, timeout)
            try:
                body = await asyncio.wait_for(
                    read_bounded_body(response, self.settings.SCAN_MAX_BODY_BYTES),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                logger.info(
                    "Body read exceeded %.1fs, checking headers only",
                    timeout,
                    extra={"action": "body_timeout", "target": url},
                )
                body = ""
            finally:
                await response.aclose()

        captured_headers = {
            key.lower(): value for key, value in response.headers.items()
        }
        findings = await self.runner.run(url, response.headers, body)

        result = PageScanResult(
            url=url,
            findings=findings,
            summary=summarize(findings),
            duration_ms=_elapsed_ms(start),
            response_headers=captured_headers,
        )
        logger.info(
            "Page scanned: %d findings in %dms",
            result.summary["total"],
            result.duration_ms,
            extra={"action": "page_scanned", "target": url},
        )
        return result

    async def _fetch(
        self, client: httpx.AsyncClient, url: str, timeout: float
    ) -> httpx.Response:
        """Send the GET request and return the unread, streaming response."""
        try:
            request = client.build_request(
                "GET",
                url,
                headers={"User-Agent": self.settings.scanner_user_agent},
            )
            return await asyncio.wait_for(
                client.send(request, stream=True),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TargetUnreachableError(url, f"timed out after {timeout:.0f}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TargetUnreachableError(url, str(exc) or type(exc).__name__) from exc

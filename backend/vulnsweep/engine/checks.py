"""
Check runner: executes the detection battery against one fetched page.

Two kinds of detections are supported:

* **Checks** -- synchronous predicates ``(url, headers, body) -> Finding |
  None`` that inspect the already-fetched response.
* **Probes** -- coroutines ``(url) -> list[Finding]`` that need their own
  network I/O (well-known files, DNS, TLS, ...).

Checks are a best-effort sweep: one raising check never affects its
siblings.  Probes run as a single batch raced against
``ASYNC_PROBE_TIMEOUT``; a timeout or a failing batch contributes no
findings instead of failing the scan.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.logging import get_logger
from vulnsweep.engine.findings import Finding, sort_findings

logger = get_logger(__name__)

SyncCheck = Callable[[str, Mapping[str, str], str], Optional[Finding]]
AsyncProbe = Callable[[str], Awaitable[list[Finding]]]


class CheckRunner:
    """Run checks and probes for one page and return sorted findings.

    Attributes:
        checks:   Synchronous predicates.
        probes:   Asynchronous probes.
        settings: Source of ``CHECK_BODY_MAX_CHARS`` and
                  ``ASYNC_PROBE_TIMEOUT``.
    """

    def __init__(
        self,
        checks: Optional[Sequence[SyncCheck]] = None,
        probes: Optional[Sequence[AsyncProbe]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        if checks is None or probes is None:
            from vulnsweep.checks import DEFAULT_CHECKS, DEFAULT_PROBES

            checks = DEFAULT_CHECKS if checks is None else checks
            probes = DEFAULT_PROBES if probes is None else probes

        self.checks: list[SyncCheck] = list(checks)
        self.probes: list[AsyncProbe] = list(probes)
        self.settings: Settings = settings or get_settings()

    async def run(
        self, url: str, headers: Mapping[str, str], body: str
    ) -> list[Finding]:
        """Run the full battery against a fetched page.

        Args:
            url:     The page URL that was fetched.
            headers: Response headers (case-insensitive mapping preferred).
            body:    Decoded response body.

        Returns:
            Sync and async findings, sorted critical first.
        """
        sync_findings = self.run_checks(url, headers, body)
        async_findings = await self.run_probes(url)
        return sort_findings([*sync_findings, *async_findings])

    def run_checks(
        self, url: str, headers: Mapping[str, str], body: str
    ) -> list[Finding]:
        """Invoke every synchronous check in isolation."""
        max_chars = self.settings.CHECK_BODY_MAX_CHARS
        if len(body) > max_chars:
            body = body[:max_chars]

        findings: list[Finding] = []
        for check in self.checks:
            try:
                result = check(url, headers, body)
            except Exception as exc:  # noqa: BLE001
                logger.debug(
                    "Check %s raised: %r",
                    getattr(check, "__name__", repr(check)),
                    exc,
                    extra={"action": "check_failed", "target": url},
                )
                continue
            if result is not None:
                findings.append(result)
        return findings

    async def run_probes(self, url: str) -> list[Finding]:
        """Run all probes as one batch under the probe deadline.

        ``asyncio.wait_for`` cancels the batch on expiry, so abandoned
        probes do not keep sockets open after the scan returns.
        """
        if not self.probes:
            return []

        try:
            return await asyncio.wait_for(
                self._gather_probes(url),
                timeout=self.settings.ASYNC_PROBE_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.info(
                "Async probes exceeded %.1fs deadline",
                self.settings.ASYNC_PROBE_TIMEOUT,
                extra={"action": "probes_timeout", "target": url},
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Async probe batch failed: %r",
                exc,
                extra={"action": "probes_failed", "target": url},
            )
        return []

    async def _gather_probes(self, url: str) -> list[Finding]:
        batches = await asyncio.gather(*(probe(url) for probe in self.probes))
        return [finding for batch in batches for finding in batch]

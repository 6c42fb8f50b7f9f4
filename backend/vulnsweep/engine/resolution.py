"""
DNS gate and HTTP reachability prober for subdomain candidates.

Candidates first pass through :class:`DnsGate`: a name with neither an A
nor an AAAA record is dropped before it costs an HTTP request.  Survivors
are probed by :class:`ReachabilityProber` with a short HEAD over HTTPS,
falling back to plain HTTP with an even shorter budget.

Both stages fan out through
:func:`~vulnsweep.core.concurrency.gather_bounded`, so one hung lookup or
probe occupies a single slot and never stalls its siblings.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, Optional

import dns.asyncresolver
import dns.exception
import dns.resolver
import httpx

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.concurrency import gather_bounded
from vulnsweep.core.logging import get_logger

logger = get_logger(__name__)


class DnsGate:
    """Resolve candidates and keep only those with an address record.

    Attributes:
        settings: Source of ``DNS_TIMEOUT`` and ``DNS_BATCH_SIZE``.
    """

    RECORD_TYPES: tuple[str, ...] = ("A", "AAAA")

    def __init__(
        self,
        settings: Optional[Settings] = None,
        resolver: Optional[dns.asyncresolver.Resolver] = None,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        self._resolver = resolver

    @property
    def resolver(self) -> dns.asyncresolver.Resolver:
        """Lazily built resolver with tight timeouts."""
        if self._resolver is None:
            resolver = dns.asyncresolver.Resolver()
            resolver.timeout = self.settings.DNS_TIMEOUT
            resolver.lifetime = self.settings.DNS_TIMEOUT
            self._resolver = resolver
        return self._resolver

    async def resolve(self, name: str) -> Optional[str]:
        """Return the first IPv4 address of *name*, else the first IPv6 one.

        Returns ``None`` when neither record type resolves within
        ``DNS_TIMEOUT``.
        """
        for rtype in self.RECORD_TYPES:
            try:
                answer = await asyncio.wait_for(
                    self.resolver.resolve(name, rtype),
                    timeout=self.settings.DNS_TIMEOUT,
                )
            except (
                asyncio.TimeoutError,
                dns.resolver.NXDOMAIN,
                dns.resolver.NoAnswer,
                dns.resolver.NoNameservers,
                dns.exception.Timeout,
            ):
                continue
            for rdata in answer:
                return str(rdata)
        return None

    async def filter_resolvable(self, names: Iterable[str]) -> list[str]:
        """Return the subset of *names* that resolved, in input order."""
        candidates = list(names)
        settled = await gather_bounded(
            candidates, self.resolve, self.settings.DNS_BATCH_SIZE
        )
        resolved = [name for name, address in settled if address]
        logger.info(
            "DNS gate kept %d/%d candidates",
            len(resolved),
            len(candidates),
            extra={"action": "dns_gate"},
        )
        return resolved


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one host.

    Attributes:
        url:         The URL that answered, or the HTTPS URL when neither did.
        reachable:   ``True`` when HTTPS or HTTP answered at all.
        status_code: HTTP status of the answering request.
    """

    url: str
    reachable: bool
    status_code: Optional[int] = None


class ReachabilityProber:
    """HEAD-probe hosts over HTTPS, falling back to HTTP.

    Attributes:
        settings:  Source of ``PROBE_HTTPS_TIMEOUT`` and ``PROBE_HTTP_TIMEOUT``.
        transport: Optional httpx transport (tests inject a mock).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        self.transport = transport

    async def probe(self, client: httpx.AsyncClient, name: str) -> ProbeResult:
        """Probe a single host name."""
        attempts = (
            ("https", self.settings.PROBE_HTTPS_TIMEOUT),
            ("http", self.settings.PROBE_HTTP_TIMEOUT),
        )
        for scheme, timeout in attempts:
            url = f"{scheme}://{name}"
            try:
                response = await asyncio.wait_for(client.head(url), timeout=timeout)
            except (asyncio.TimeoutError, httpx.HTTPError):
                continue
            return ProbeResult(url=url, reachable=True, status_code=response.status_code)
        return ProbeResult(url=f"https://{name}", reachable=False)

    async def probe_all(
        self, names: Iterable[str], concurrency: int
    ) -> dict[str, ProbeResult]:
        """Probe *names* with at most *concurrency* hosts in flight."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.PROBE_HTTPS_TIMEOUT),
            follow_redirects=True,
            headers={"User-Agent": self.settings.scanner_user_agent},
            transport=self.transport,
        ) as client:
            settled = await gather_bounded(
                names,
                lambda name: self.probe(client, name),
                concurrency,
            )
        return dict(settled)

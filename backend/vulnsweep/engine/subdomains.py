"""
Subdomain reconnaissance for VulnSweep.

Pipeline for a target URL:

1. Reduce the host to its registrable root domain.
2. Query every registered OSINT source concurrently; each adapter fails
   open on its own.
3. Normalise and scope-filter the hostnames, recording which sources
   reported each one.
4. Cap the passive candidates before any expensive verification.
5. Drop candidates without DNS records, then HEAD-probe the rest.
6. Run a short brute-force dictionary through the same DNS gate and probe,
   skipping names already verified passively.
7. Merge both result sets and rank reachable hosts first.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence
from urllib.parse import urlsplit

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.logging import get_logger
from vulnsweep.engine.resolution import DnsGate, ProbeResult, ReachabilityProber
from vulnsweep.modules import BRUTE_FORCE_PREFIXES, BRUTE_FORCE_SOURCE, SourceRegistry
from vulnsweep.modules.base import BaseSourceModule

logger = get_logger(__name__)

TWO_PART_SUFFIXES: frozenset[str] = frozenset({
    "co.uk", "co.jp", "com.au", "com.br", "co.nz",
    "co.za", "org.uk", "net.au", "ac.uk", "gov.uk",
})

_FORBIDDEN_CHARS: tuple[str, ...] = ("*", " ", "@")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DiscoveredSubdomain:
    """A verified subdomain and where it was found.

    Attributes:
        subdomain:   Fully-qualified name.
        url:         URL that answered the probe (HTTPS when none did).
        reachable:   Whether HTTPS or HTTP answered.
        status_code: Observed HTTP status when reachable.
        sources:     Provenance tags, one per independent source.
    """

    subdomain: str
    url: str
    reachable: bool
    status_code: Optional[int] = None
    sources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "subdomain": self.subdomain,
            "url": self.url,
            "reachable": self.reachable,
            "statusCode": self.status_code,
            "sources": list(self.sources),
        }


@dataclass
class SubdomainReport:
    """Final, ranked discovery result for a root domain."""

    domain: str
    subdomains: list[DiscoveredSubdomain] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.subdomains)

    @property
    def reachable(self) -> int:
        return sum(1 for sub in self.subdomains if sub.reachable)

    @property
    def source_counts(self) -> dict[str, int]:
        """Number of reported subdomains each source contributed to."""
        counts: dict[str, int] = {}
        for sub in self.subdomains:
            for source in sub.sources:
                counts[source] = counts.get(source, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain,
            "total": self.total,
            "reachable": self.reachable,
            "subdomains": [sub.to_dict() for sub in self.subdomains],
            "sources": self.source_counts,
        }


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def extract_root_domain(hostname: str) -> str:
    """Reduce *hostname* to its registrable root domain.

    ``www.`` is stripped first; two-part public suffixes such as ``co.uk``
    keep three labels, everything else keeps two.

    >>> extract_root_domain("www.shop.example.co.uk")
    'example.co.uk'
    >>> extract_root_domain("api.example.com")
    'example.com'
    """
    stripped = hostname.strip().lower().rstrip(".")
    if stripped.startswith("www."):
        stripped = stripped[len("www."):]
    labels = stripped.split(".")
    if len(labels) >= 3 and ".".join(labels[-2:]) in TWO_PART_SUFFIXES:
        return ".".join(labels[-3:])
    if len(labels) >= 2:
        return ".".join(labels[-2:])
    return stripped


def normalize_hostname(raw: str) -> str:
    """Lowercase, trim, and strip a leading wildcard label."""
    name = raw.strip().lower()
    while name.startswith("*."):
        name = name[2:]
    return name


def is_in_scope(name: str, root_domain: str) -> bool:
    """``True`` when *name* is *root_domain* or one of its subdomains."""
    if not name or any(char in name for char in _FORBIDDEN_CHARS):
        return False
    return name == root_domain or name.endswith(f".{root_domain}")


def rank_subdomains(items: Iterable[DiscoveredSubdomain]) -> list[DiscoveredSubdomain]:
    """Reachable hosts first, then alphabetical."""
    return sorted(items, key=lambda sub: (not sub.reachable, sub.subdomain))


def merge_subdomains(
    *groups: Iterable[DiscoveredSubdomain],
) -> list[DiscoveredSubdomain]:
    """Union several result sets keyed by subdomain.

    Provenance tags are unioned in first-seen order.  Reachability is OR-ed:
    a reachable entry upgrades an unreachable one (taking its URL and
    status), and nothing downgrades a reachable entry.
    """
    merged: dict[str, DiscoveredSubdomain] = {}
    for group in groups:
        for item in group:
            existing = merged.get(item.subdomain)
            if existing is None:
                merged[item.subdomain] = DiscoveredSubdomain(
                    subdomain=item.subdomain,
                    url=item.url,
                    reachable=item.reachable,
                    status_code=item.status_code,
                    sources=list(item.sources),
                )
                continue

            for source in item.sources:
                if source not in existing.sources:
                    existing.sources.append(source)
            if item.reachable and not existing.reachable:
                existing.reachable = True
                existing.url = item.url
                existing.status_code = item.status_code

    return rank_subdomains(merged.values())


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class SubdomainReconnaissance:
    """Passive OSINT plus brute-force subdomain discovery.

    Attributes:
        sources:  OSINT adapters to query.
        dns_gate: :class:`DnsGate` used for both candidate sets.
        prober:   :class:`ReachabilityProber` used for both candidate sets.
        prefixes: Brute-force dictionary.
    """

    def __init__(
        self,
        sources: Optional[Sequence[BaseSourceModule]] = None,
        dns_gate: Optional[DnsGate] = None,
        prober: Optional[ReachabilityProber] = None,
        settings: Optional[Settings] = None,
        prefixes: Sequence[str] = BRUTE_FORCE_PREFIXES,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        if sources is None:
            sources = SourceRegistry.get_all(timeout=self.settings.OSINT_TIMEOUT)
        self.sources: list[BaseSourceModule] = list(sources)
        self.dns_gate: DnsGate = dns_gate or DnsGate(settings=self.settings)
        self.prober: ReachabilityProber = prober or ReachabilityProber(settings=self.settings)
        self.prefixes: tuple[str, ...] = tuple(prefixes)

    async def discover(self, url: str) -> SubdomainReport:
        """Discover subdomains of the root domain behind *url*.

        Raises:
            ValueError: If *url* has no host component.
        """
        hostname = urlsplit(url).hostname
        if not hostname:
            raise ValueError(f"URL has no host: {url!r}")
        root_domain = extract_root_domain(hostname)

        logger.info(
            "Starting subdomain discovery",
            extra={"action": "subdomains_start", "target": root_domain},
        )

        provenance = await self.collect_passive(root_domain)
        candidates = self.select_candidates(provenance)

        excluded = set(provenance)
        brute_candidates: list[str] = []
        for prefix in self.prefixes:
            name = f"{prefix}.{root_domain}"
            if name not in excluded:
                excluded.add(name)
                brute_candidates.append(name)

        passive, brute = await asyncio.gather(
            self._verify(
                candidates,
                provenance,
                self.settings.PASSIVE_PROBE_CONCURRENCY,
            ),
            self._verify(
                brute_candidates,
                {name: [BRUTE_FORCE_SOURCE] for name in brute_candidates},
                self.settings.BRUTE_PROBE_CONCURRENCY,
            ),
        )

        report = SubdomainReport(
            domain=root_domain,
            subdomains=merge_subdomains(passive, brute),
        )
        logger.info(
            "Subdomain discovery found %d (%d reachable)",
            report.total,
            report.reachable,
            extra={"action": "subdomains_completed", "target": root_domain},
        )
        return report

    async def collect_passive(self, root_domain: str) -> dict[str, list[str]]:
        """Query every source and map each in-scope name to its sources."""
        results = await asyncio.gather(
            *(source.fetch(root_domain) for source in self.sources),
            return_exceptions=True,
        )

        provenance: dict[str, list[str]] = {}
        for source, names in zip(self.sources, results):
            if isinstance(names, BaseException):
                logger.warning(
                    "Source %s raised past its boundary: %r",
                    source.name,
                    names,
                    extra={"action": "source_failed", "target": root_domain},
                )
                continue
            for raw in names:
                name = normalize_hostname(raw)
                if not is_in_scope(name, root_domain):
                    continue
                tags = provenance.setdefault(name, [])
                if source.name not in tags:
                    tags.append(source.name)
        return provenance

    def select_candidates(self, provenance: dict[str, list[str]]) -> list[str]:
        """Cap the passive set, preferring names corroborated by more sources."""
        ordered = sorted(provenance, key=lambda name: (-len(provenance[name]), name))
        return ordered[: self.settings.PASSIVE_CANDIDATE_CAP]

    async def _verify(
        self,
        names: list[str],
        provenance: dict[str, list[str]],
        concurrency: int,
    ) -> list[DiscoveredSubdomain]:
        if not names:
            return []

        resolvable = await self.dns_gate.filter_resolvable(names)
        if not resolvable:
            return []
        probes = await self.prober.probe_all(resolvable, concurrency)

        verified: list[DiscoveredSubdomain] = []
        for name in resolvable:
            probe = probes.get(name) or ProbeResult(url=f"https://{name}", reachable=False)
            verified.append(
                DiscoveredSubdomain(
                    subdomain=name,
                    url=probe.url,
                    reachable=probe.reachable,
                    status_code=probe.status_code,
                    sources=list(provenance.get(name, [])),
                )
            )
        return verified

"""
Tests for subdomain reconnaissance.

Covers root-domain extraction, scope filtering, the reachability-aware
merge, and the full pipeline with fake sources, a fake DNS gate, and a
fake prober.
"""

from __future__ import annotations

from typing import Iterable

import httpx
import pytest

from vulnsweep.config import Settings
from vulnsweep.engine.resolution import ProbeResult
from vulnsweep.engine.subdomains import (
    DiscoveredSubdomain,
    SubdomainReconnaissance,
    extract_root_domain,
    is_in_scope,
    merge_subdomains,
    normalize_hostname,
)
from vulnsweep.modules.base import BaseSourceModule


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class _StaticSource(BaseSourceModule):
    """Source that returns a fixed list without touching the network."""

    def __init__(self, name: str, names: list[str]) -> None:
        super().__init__()
        self.name = name
        self._names = names

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        return list(self._names)


class _FailingSource(BaseSourceModule):
    name = "failing"

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        raise httpx.ConnectError("service down")


class _ExplodingSource(BaseSourceModule):
    """Breaks its own contract by raising out of ``fetch``."""

    name = "exploding"

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        return []

    async def fetch(self, domain: str) -> list[str]:
        raise RuntimeError("adapter bug")


class _FakeGate:
    def __init__(self, resolvable: set[str]) -> None:
        self.resolvable = resolvable
        self.calls: list[list[str]] = []

    async def filter_resolvable(self, names: Iterable[str]) -> list[str]:
        names = list(names)
        self.calls.append(names)
        return [name for name in names if name in self.resolvable]


class _FakeProber:
    def __init__(self, reachable: dict[str, int]) -> None:
        self.reachable = reachable
        self.concurrency: list[int] = []

    async def probe_all(self, names: Iterable[str], concurrency: int) -> dict[str, ProbeResult]:
        self.concurrency.append(concurrency)
        results: dict[str, ProbeResult] = {}
        for name in names:
            if name in self.reachable:
                results[name] = ProbeResult(
                    url=f"https://{name}", reachable=True, status_code=self.reachable[name]
                )
            else:
                results[name] = ProbeResult(url=f"https://{name}", reachable=False)
        return results


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("hostname", "expected"),
    [
        ("www.shop.example.co.uk", "example.co.uk"),
        ("api.example.com", "example.com"),
        ("www.example.com", "example.com"),
        ("example.com", "example.com"),
        ("a.b.example.com.au", "example.com.au"),
        ("localhost", "localhost"),
    ],
)
def test_extract_root_domain(hostname: str, expected: str) -> None:
    assert extract_root_domain(hostname) == expected


def test_normalize_hostname_strips_wildcards_and_case() -> None:
    assert normalize_hostname("  *.API.Example.com ") == "api.example.com"
    assert normalize_hostname("*.*.example.com") == "example.com"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("example.com", True),
        ("api.example.com", True),
        ("deep.api.example.com", True),
        ("notexample.com", False),
        ("example.com.evil.net", False),
        ("user@example.com", False),
        ("bad name.example.com", False),
        ("*.example.com", False),
        ("", False),
    ],
)
def test_is_in_scope(name: str, expected: bool) -> None:
    assert is_in_scope(name, "example.com") is expected


def test_merge_upgrades_unreachable_entry() -> None:
    passive = [
        DiscoveredSubdomain("mail.example.com", "https://mail.example.com", False, None, ["crtsh"]),
    ]
    brute = [
        DiscoveredSubdomain("mail.example.com", "http://mail.example.com", True, 200, ["brute-force"]),
    ]

    merged = merge_subdomains(passive, brute)

    assert len(merged) == 1
    assert merged[0].reachable is True
    assert merged[0].status_code == 200
    assert merged[0].url == "http://mail.example.com"
    assert merged[0].sources == ["crtsh", "brute-force"]


def test_merge_never_downgrades_reachable_entry() -> None:
    first = [DiscoveredSubdomain("a.example.com", "https://a.example.com", True, 301, ["anubis"])]
    second = [DiscoveredSubdomain("a.example.com", "https://a.example.com", False, None, ["anubis"])]

    merged = merge_subdomains(first, second)

    assert merged[0].reachable is True
    assert merged[0].status_code == 301
    assert merged[0].sources == ["anubis"]


def test_merge_ranks_reachable_first_then_alphabetical() -> None:
    items = [
        DiscoveredSubdomain("b.example.com", "https://b.example.com", False),
        DiscoveredSubdomain("z.example.com", "https://z.example.com", True, 200),
        DiscoveredSubdomain("a.example.com", "https://a.example.com", False),
        DiscoveredSubdomain("c.example.com", "https://c.example.com", True, 200),
    ]

    ordered = [sub.subdomain for sub in merge_subdomains(items)]

    assert ordered == ["c.example.com", "z.example.com", "a.example.com", "b.example.com"]


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_brute_force_only_discovery(settings: Settings) -> None:
    """With every source empty, only dictionary hits are reported."""
    recon = SubdomainReconnaissance(
        sources=[_StaticSource("crtsh", [])],
        dns_gate=_FakeGate({"www.example.com", "api.example.com"}),
        prober=_FakeProber({"www.example.com": 200, "api.example.com": 401}),
        settings=settings,
    )

    report = await recon.discover("https://www.example.com/login")

    assert report.domain == "example.com"
    assert report.total == 2
    assert report.reachable == 2
    assert [sub.subdomain for sub in report.subdomains] == ["api.example.com", "www.example.com"]
    assert all(sub.sources == ["brute-force"] for sub in report.subdomains)
    assert report.source_counts == {"brute-force": 2}


@pytest.mark.asyncio
async def test_passive_provenance_and_scope(settings: Settings) -> None:
    recon = SubdomainReconnaissance(
        sources=[
            _StaticSource("crtsh", ["*.example.com", "API.example.com", "evil.com", "x@example.com"]),
            _StaticSource("anubis", ["api.example.com", "dev.example.com"]),
        ],
        dns_gate=_FakeGate({"example.com", "api.example.com", "dev.example.com"}),
        prober=_FakeProber({"api.example.com": 200}),
        settings=settings,
        prefixes=(),
    )

    report = await recon.discover("https://example.com")
    by_name = {sub.subdomain: sub for sub in report.subdomains}

    assert set(by_name) == {"example.com", "api.example.com", "dev.example.com"}
    assert by_name["api.example.com"].sources == ["crtsh", "anubis"]
    assert by_name["dev.example.com"].reachable is False
    assert by_name["dev.example.com"].url == "https://dev.example.com"
    assert report.subdomains[0].subdomain == "api.example.com"
    assert report.source_counts == {"crtsh": 2, "anubis": 2}


@pytest.mark.asyncio
async def test_failing_sources_do_not_block_siblings(settings: Settings) -> None:
    recon = SubdomainReconnaissance(
        sources=[
            _FailingSource(),
            _ExplodingSource(),
            _StaticSource("hackertarget", ["shop.example.com"]),
        ],
        dns_gate=_FakeGate({"shop.example.com"}),
        prober=_FakeProber({"shop.example.com": 200}),
        settings=settings,
        prefixes=(),
    )

    report = await recon.discover("https://example.com")

    assert [sub.subdomain for sub in report.subdomains] == ["shop.example.com"]
    assert report.subdomains[0].sources == ["hackertarget"]


@pytest.mark.asyncio
async def test_passive_candidates_are_capped_before_dns() -> None:
    names = [f"host{index:02d}.example.com" for index in range(10)]
    gate = _FakeGate(set(names))
    recon = SubdomainReconnaissance(
        sources=[_StaticSource("crtsh", names)],
        dns_gate=gate,
        prober=_FakeProber({}),
        settings=Settings(PASSIVE_CANDIDATE_CAP=3),
        prefixes=(),
    )

    report = await recon.discover("https://example.com")

    assert gate.calls == [names[:3]]
    assert report.total == 3
    assert report.reachable == 0


@pytest.mark.asyncio
async def test_brute_force_skips_passive_candidates(settings: Settings) -> None:
    gate = _FakeGate({"www.example.com", "mail.example.com"})
    prober = _FakeProber({"www.example.com": 200})
    recon = SubdomainReconnaissance(
        sources=[_StaticSource("crtsh", ["www.example.com"])],
        dns_gate=gate,
        prober=prober,
        settings=settings,
        prefixes=("www", "mail", "www"),
    )

    report = await recon.discover("https://example.com")
    by_name = {sub.subdomain: sub for sub in report.subdomains}

    assert ["mail.example.com"] in gate.calls
    assert by_name["www.example.com"].sources == ["crtsh"]
    assert by_name["mail.example.com"].sources == ["brute-force"]
    assert sorted(prober.concurrency) == sorted(
        [settings.PASSIVE_PROBE_CONCURRENCY, settings.BRUTE_PROBE_CONCURRENCY]
    )


@pytest.mark.asyncio
async def test_brute_force_skips_passive_names_past_the_cap() -> None:
    gate = _FakeGate({"a.example.com", "b.example.com", "www.example.com"})
    recon = SubdomainReconnaissance(
        sources=[_StaticSource("crtsh", ["a.example.com", "b.example.com", "www.example.com"])],
        dns_gate=gate,
        prober=_FakeProber({}),
        settings=Settings(PASSIVE_CANDIDATE_CAP=2),
        prefixes=("www",),
    )

    report = await recon.discover("https://example.com")

    assert gate.calls == [["a.example.com", "b.example.com"]]
    assert "www.example.com" not in {sub.subdomain for sub in report.subdomains}
    assert all("brute-force" not in sub.sources for sub in report.subdomains)


@pytest.mark.asyncio
async def test_report_to_dict_shape(settings: Settings) -> None:
    recon = SubdomainReconnaissance(
        sources=[],
        dns_gate=_FakeGate({"www.example.com"}),
        prober=_FakeProber({"www.example.com": 200}),
        settings=settings,
        prefixes=("www",),
    )

    data = (await recon.discover("https://example.com")).to_dict()

    assert data == {
        "domain": "example.com",
        "total": 1,
        "reachable": 1,
        "subdomains": [
            {
                "subdomain": "www.example.com",
                "url": "https://www.example.com",
                "reachable": True,
                "statusCode": 200,
                "sources": ["brute-force"],
            }
        ],
        "sources": {"brute-force": 1},
    }

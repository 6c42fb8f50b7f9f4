"""
Tests for the check runner.

Validates per-check isolation, body truncation before checks run, the
all-or-nothing probe batch under its deadline, and the final ordering.
"""

from __future__ import annotations

import asyncio
from typing import Mapping, Optional

import pytest
from support import make_finding

from vulnsweep.config import Settings
from vulnsweep.engine.checks import CheckRunner
from vulnsweep.engine.findings import Finding, Severity, summarize


def _raising_check(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
    raise RuntimeError("broken predicate")


def _csp_check(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
    if "content-security-policy" in headers:
        return None
    return make_finding("csp-missing", Severity.MEDIUM)


def _quiet_check(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
    return None


def test_raising_check_does_not_affect_siblings(settings: Settings) -> None:
    runner = CheckRunner(checks=[_raising_check, _csp_check], probes=[], settings=settings)

    findings = runner.run_checks("https://example.com", {}, "")

    assert [finding.id for finding in findings] == ["csp-missing"]


def test_body_is_truncated_before_checks_run() -> None:
    seen: list[int] = []

    def _measure(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
        seen.append(len(body))
        return None

    runner = CheckRunner(
        checks=[_measure],
        probes=[],
        settings=Settings(CHECK_BODY_MAX_CHARS=10),
    )

    runner.run_checks("https://example.com", {}, "x" * 500)

    assert seen == [10]


@pytest.mark.asyncio
async def test_probe_batch_timeout_contributes_nothing() -> None:
    """A slow probe sinks the whole batch, including a fast sibling."""

    async def fast_probe(url: str) -> list[Finding]:
        return [make_finding("fast", Severity.LOW)]

    async def slow_probe(url: str) -> list[Finding]:
        await asyncio.sleep(5)
        return [make_finding("slow", Severity.LOW)]

    runner = CheckRunner(
        checks=[_csp_check],
        probes=[fast_probe, slow_probe],
        settings=Settings(ASYNC_PROBE_TIMEOUT=0.05),
    )

    findings = await runner.run("https://example.com", {}, "")

    assert [finding.id for finding in findings] == ["csp-missing"]


@pytest.mark.asyncio
async def test_raising_probe_yields_empty_batch(settings: Settings) -> None:
    async def ok_probe(url: str) -> list[Finding]:
        return [make_finding("ok", Severity.INFO)]

    async def bad_probe(url: str) -> list[Finding]:
        raise ConnectionError("probe failed")

    runner = CheckRunner(checks=[], probes=[ok_probe, bad_probe], settings=settings)

    assert await runner.run_probes("https://example.com") == []


@pytest.mark.asyncio
async def test_run_combines_and_sorts_findings(settings: Settings) -> None:
    """Sync and async findings are merged with the most severe first."""

    def high_check(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
        return make_finding("exposed-secret", Severity.HIGH)

    async def info_probe(url: str) -> list[Finding]:
        return [make_finding("security-txt-missing", Severity.INFO)]

    runner = CheckRunner(
        checks=[_quiet_check, high_check, _raising_check],
        probes=[info_probe],
        settings=settings,
    )

    findings = await runner.run("https://example.com", {}, "<html></html>")
    summary = summarize(findings)

    assert [finding.id for finding in findings] == ["exposed-secret", "security-txt-missing"]
    assert summary["high"] == 1
    assert summary["info"] == 1
    assert summary["total"] == 2


def test_default_battery_is_wired_when_not_given(settings: Settings) -> None:
    runner = CheckRunner(settings=settings)
    assert runner.checks
    assert runner.probes

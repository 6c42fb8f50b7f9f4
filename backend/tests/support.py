"""Plain helpers shared by test modules (fixtures live in ``conftest.py``)."""

from __future__ import annotations

from typing import Optional

import httpx

from vulnsweep.engine.findings import Finding, Severity


def html_page(*hrefs: str, headers: Optional[dict[str, str]] = None) -> httpx.Response:
    """Build a 200 text/html response containing one anchor per href."""
    anchors = "\n".join(f'<a href="{href}">link</a>' for href in hrefs)
    merged = {"content-type": "text/html; charset=utf-8"}
    merged.update(headers or {})
    return httpx.Response(
        200,
        headers=merged,
        text=f"<html><body>{anchors}</body></html>",
    )


def site_transport(pages: dict[str, object]) -> httpx.MockTransport:
    """MockTransport serving a ``{url: response}`` map.

    Unknown URLs answer 404.  A value that is an exception instance is
    raised instead, which simulates network failures.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        answer = pages.get(str(request.url))
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            return httpx.Response(404, headers={"content-type": "text/html"}, text="")
        return answer  # type: ignore[return-value]

    return httpx.MockTransport(handler)


def make_finding(
    finding_id: str,
    severity: Severity = Severity.MEDIUM,
    title: Optional[str] = None,
) -> Finding:
    """Return a minimal finding for aggregation tests."""
    return Finding(
        id=finding_id,
        title=title or finding_id,
        description=f"{finding_id} description",
        severity=severity,
        category="headers",
        remediation=f"fix {finding_id}",
    )

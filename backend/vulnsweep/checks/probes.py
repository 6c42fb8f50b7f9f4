"""
Asynchronous probes that need their own requests against the target.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit

import httpx

from vulnsweep.engine.findings import Finding, Severity

logger = logging.getLogger(__name__)

_SECURITY_TXT_PATHS: tuple[str, ...] = ("/.well-known/security.txt", "/security.txt")


async def probe_security_txt(
    url: str,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: float = 5.0,
) -> list[Finding]:
    """Report a missing RFC 9116 ``security.txt`` on the page's origin.

    Both well-known locations are requested in parallel; any 200 answer
    counts as present.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return []
    origin = f"{parts.scheme}://{parts.netloc}"

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        transport=transport,
    ) as client:
        responses = await asyncio.gather(
            *(client.get(f"{origin}{path}") for path in _SECURITY_TXT_PATHS),
            return_exceptions=True,
        )

    for response in responses:
        if isinstance(response, httpx.Response) and response.status_code == 200:
            return []
        if isinstance(response, BaseException):
            logger.debug("security.txt request failed for %s: %r", origin, response)

    return [
        Finding(
            id="security-txt-missing",
            title="Missing security.txt",
            description=(
                "No security.txt file was found at /.well-known/security.txt "
                "or /security.txt."
            ),
            severity=Severity.INFO,
            category="configuration",
            remediation=(
                "Create /.well-known/security.txt with at least Contact and "
                "Expires fields."
            ),
            evidence=f"Neither {origin}/.well-known/security.txt nor {origin}/security.txt returned 200.",
        )
    ]

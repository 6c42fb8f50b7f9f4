"""
Wayback Machine source for VulnSweep.

Queries the Internet Archive CDX API for archived URLs under the target
domain and extracts their hostnames.
"""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlparse

import httpx

from vulnsweep.modules.base import BaseSourceModule
from vulnsweep.modules.registry import SourceRegistry


@SourceRegistry.register
class WebArchiveModule(BaseSourceModule):
    """Subdomain discovery via Wayback Machine CDX API."""

    name: str = "webarchive"
    description: str = "Subdomain Discovery via Wayback Machine Archive"

    CDX_URL: str = "https://web.archive.org/cdx/search/cdx"

    # Valid DNS hostname: labels separated by dots, each label is alphanumeric
    # or hyphen, starting with a letter or digit.
    _VALID_HOSTNAME_RE = re.compile(
        r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,}$"
    )

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        response = await client.get(
            self.CDX_URL,
            params={
                "url": f"*.{domain}",
                "output": "json",
                "fl": "original",
                "collapse": "urlkey",
                "limit": "10000",
            },
        )
        response.raise_for_status()

        rows: list[list[str]] = response.json() or []
        hostnames: set[str] = set()

        # First row is the header ["original"]
        for row in rows[1:]:
            if not row:
                continue
            try:
                hostname = urlparse(row[0]).hostname
            except ValueError:
                continue
            if not hostname:
                continue
            hostname = hostname.strip().lower()
            # Filter junk: URL-encoded artifacts and invalid DNS names
            if self._VALID_HOSTNAME_RE.match(hostname):
                hostnames.add(hostname)
        return sorted(hostnames)

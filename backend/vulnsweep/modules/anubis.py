"""
Anubis source for VulnSweep.

Queries the Anubis subdomain database (jldc.me), which returns a flat
JSON array of hostnames.
"""

from __future__ import annotations

from typing import Iterable

import httpx

from vulnsweep.modules.base import BaseSourceModule
from vulnsweep.modules.registry import SourceRegistry


@SourceRegistry.register
class AnubisModule(BaseSourceModule):
    """Subdomain discovery via Anubis (jldc.me) API."""

    name: str = "anubis"
    description: str = "Subdomain Discovery via Anubis Database"

    API_URL: str = "https://jldc.me/anubis/subdomains/{domain}"

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        response = await client.get(self.API_URL.format(domain=domain))
        response.raise_for_status()

        entries = response.json()
        if not isinstance(entries, list):
            return []
        return [entry for entry in entries if isinstance(entry, str)]

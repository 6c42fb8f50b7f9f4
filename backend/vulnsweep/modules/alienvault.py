"""
AlienVault OTX source for VulnSweep.

Queries the AlienVault Open Threat Exchange (OTX) passive DNS API to
discover subdomains.  This is a free, keyless API that aggregates DNS
observations from the OTX sensor network.
"""

from __future__ import annotations

from typing import Iterable

import httpx

from vulnsweep.modules.base import BaseSourceModule
from vulnsweep.modules.registry import SourceRegistry


@SourceRegistry.register
class AlienVaultModule(BaseSourceModule):
    """Subdomain discovery via AlienVault OTX passive DNS."""

    name: str = "alienvault"
    description: str = "Subdomain Discovery via AlienVault OTX Passive DNS"

    OTX_URL: str = "https://otx.alienvault.com/api/v1/indicators/domain/{domain}/passive_dns"

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        response = await client.get(self.OTX_URL.format(domain=domain))
        response.raise_for_status()

        data = response.json()
        return [record.get("hostname") or "" for record in data.get("passive_dns", [])]

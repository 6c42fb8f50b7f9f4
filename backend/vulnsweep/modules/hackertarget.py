"""
HackerTarget source for VulnSweep.

Queries the HackerTarget free host search API to discover subdomains.
Returns plain-text results in ``host,ip`` format.  Free tier allows
~100 queries per day without an API key.
"""

from __future__ import annotations

import logging
from typing import Iterable

import httpx

from vulnsweep.modules.base import BaseSourceModule
from vulnsweep.modules.registry import SourceRegistry

logger = logging.getLogger(__name__)


@SourceRegistry.register
class HackerTargetModule(BaseSourceModule):
    """Subdomain discovery via HackerTarget host search."""

    name: str = "hackertarget"
    description: str = "Subdomain Discovery via HackerTarget Host Search"

    API_URL: str = "https://api.hackertarget.com/hostsearch/"

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        response = await client.get(self.API_URL, params={"q": domain})
        response.raise_for_status()

        text = response.text.strip()

        # HackerTarget answers 200 with "error ..." or "API count exceeded".
        if text.startswith("error") or text.startswith("API count"):
            logger.warning("HackerTarget API error: %s", text[:200])
            return []

        return [line.split(",", 1)[0] for line in text.splitlines()]

"""
Certificate Transparency source for VulnSweep.

Queries the crt.sh database to discover subdomains that appear in
publicly logged TLS certificates.  This is a purely passive technique
and one of the most effective ways to enumerate an organisation's
external attack surface.
"""

from __future__ import annotations

from typing import Any, Iterable

import httpx

from vulnsweep.modules.base import BaseSourceModule
from vulnsweep.modules.registry import SourceRegistry


@SourceRegistry.register
class CrtshModule(BaseSourceModule):
    """Subdomain discovery via Certificate Transparency logs (crt.sh).

    Sends a single JSON query to ``crt.sh`` for certificates matching the
    target domain and extracts names from both the ``common_name`` and the
    newline-separated ``name_value`` field of each entry.
    """

    name: str = "crtsh"
    description: str = "Subdomain Discovery via Certificate Transparency Logs"

    CRTSH_URL: str = "https://crt.sh/"

    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        response = await client.get(
            self.CRTSH_URL,
            params={"q": f"%.{domain}", "output": "json"},
        )
        response.raise_for_status()

        entries: list[dict[str, Any]] = response.json()
        names: list[str] = []
        for entry in entries:
            common_name: str = entry.get("common_name") or ""
            name_value: str = entry.get("name_value") or ""
            names.append(common_name)
            names.extend(name_value.split("\n"))
        return names

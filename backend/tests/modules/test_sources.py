"""
Tests for the AlienVault, HackerTarget, Anubis, and Wayback Machine sources.
"""

from __future__ import annotations

import asyncio
import time
from typing import AsyncIterator

import httpx
import pytest

from vulnsweep.modules.alienvault import AlienVaultModule
from vulnsweep.modules.anubis import AnubisModule
from vulnsweep.modules.hackertarget import HackerTargetModule
from vulnsweep.modules.webarchive import WebArchiveModule


def _transport(status_code: int = 200, **kwargs: object) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, **kwargs)  # type: ignore[arg-type]

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_alienvault_reads_passive_dns_hostnames() -> None:
    module = AlienVaultModule(transport=_transport(json={
        "passive_dns": [
            {"hostname": "vpn.example.com", "address": "192.0.2.1"},
            {"hostname": "mail.example.com"},
            {"address": "192.0.2.9"},
        ]
    }))

    assert await module.fetch("example.com") == ["vpn.example.com", "mail.example.com"]


@pytest.mark.asyncio
async def test_hackertarget_parses_csv_lines() -> None:
    module = HackerTargetModule(transport=_transport(
        text="www.example.com,192.0.2.1\napi.example.com,192.0.2.2\n"
    ))

    assert await module.fetch("example.com") == ["www.example.com", "api.example.com"]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["error check your search parameter", "API count exceeded - Increase Quota"])
async def test_hackertarget_error_text_yields_nothing(body: str) -> None:
    module = HackerTargetModule(transport=_transport(text=body))
    assert await module.fetch("example.com") == []


@pytest.mark.asyncio
async def test_anubis_returns_string_entries_only() -> None:
    module = AnubisModule(transport=_transport(json=["a.example.com", 42, "b.example.com"]))
    assert await module.fetch("example.com") == ["a.example.com", "b.example.com"]


@pytest.mark.asyncio
async def test_anubis_non_list_payload_yields_nothing() -> None:
    module = AnubisModule(transport=_transport(json={"error": "not found"}))
    assert await module.fetch("example.com") == []


@pytest.mark.asyncio
async def test_webarchive_extracts_valid_hostnames() -> None:
    module = WebArchiveModule(transport=_transport(json=[
        ["original"],
        ["https://blog.example.com/post/1"],
        ["http://BLOG.example.com:80/other"],
        ["http://%2Fjunk.example.com/"],
        ["https://shop.example.com/?q=1"],
        [],
    ]))

    assert await module.fetch("example.com") == ["blog.example.com", "shop.example.com"]


@pytest.mark.asyncio
async def test_source_http_error_fails_open() -> None:
    module = WebArchiveModule(transport=_transport(status_code=500, text="oops"))
    assert await module.fetch("example.com") == []


@pytest.mark.asyncio
async def test_slow_drip_upstream_is_cut_off_at_the_deadline() -> None:
    async def drip() -> AsyncIterator[bytes]:
        for _ in range(100):
            await asyncio.sleep(0.05)
            yield b"a"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=drip())

    module = HackerTargetModule(timeout=0.3, transport=httpx.MockTransport(handler))

    start = time.monotonic()
    names = await module.fetch("example.com")
    elapsed = time.monotonic() - start

    assert names == []
    assert elapsed < 2.0

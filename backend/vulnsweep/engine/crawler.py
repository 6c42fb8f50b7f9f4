"""
Link discoverer: breadth-first, same-host page discovery.

Starting from an entry URL the discoverer fetches pages one at a time,
extracts ``<a href>`` targets from static HTML, and queues every new page on
the entry host until the page cap is reached.  It never renders JavaScript,
never follows links to other hosts, and drops static assets and framework
internals, so the output is a short list of human-facing pages worth
scanning.

The visited set and queue are locals owned by a single :meth:`discover`
call; nothing is shared between concurrent discoveries.
"""

from __future__ import annotations

import asyncio
import html
import re
from collections import deque
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from vulnsweep.config import Settings, get_settings
from vulnsweep.core.logging import get_logger
from vulnsweep.engine.body import read_bounded_body

logger = get_logger(__name__)

_ANCHOR_HREF_RE: re.Pattern[str] = re.compile(
    r"""<a\s[^>]*?href\s*=\s*["']([^"']*)["']""",
    re.IGNORECASE,
)

_SKIPPED_PREFIXES: tuple[str, ...] = ("mailto:", "tel:", "javascript:", "data:", "#")

# Encoded brackets / angle brackets: template placeholders and injection junk.
_ENCODED_JUNK_RE: re.Pattern[str] = re.compile(r"%5[bBdDeE]|%7[bBdD]|%3[cCeE]")

_ASSET_EXTENSION_RE: re.Pattern[str] = re.compile(
    r"\.(?:png|jpe?g|gif|svg|webp|ico|avif|bmp"
    r"|css|js|mjs|cjs|map|wasm"
    r"|woff2?|ttf|eot|otf"
    r"|zip|tar|gz|tgz|rar|7z"
    r"|mp4|mp3|wav|ogg|webm|mov|avi"
    r"|pdf|docx?|xlsx?|pptx?|txt"
    r"|xml|rss|atom|json)$",
    re.IGNORECASE,
)

_SKIPPED_PATH_RE: re.Pattern[str] = re.compile(
    r"(/_next/|/static/|/assets/|/api/|/favicon|/robots\.txt|/sitemap"
    r"|/manifest|/sw\.js|/workbox)",
    re.IGNORECASE,
)

_DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Reduce *url* to scheme, host, path, and query (fragment dropped).

    Scheme and host are lowercased, default ports removed, and an empty
    path becomes ``/``.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = (parts.hostname or "").lower()
    if ":" in netloc:
        netloc = f"[{netloc}]"
    if parts.port is not None and parts.port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def _is_crawlable_href(href: str) -> bool:
    if not href:
        return False
    lower_href = href.lower()
    if lower_href.startswith(_SKIPPED_PREFIXES):
        return False
    if _ENCODED_JUNK_RE.search(href):
        return False
    return True


def extract_links(body: str, base_url: str, allowed_host: str) -> list[str]:
    """Extract normalized same-host page links from an HTML body.

    Args:
        body:         HTML text.
        base_url:     URL the body was served from (post-redirect); relative
                      hrefs are resolved against it.
        allowed_host: Only links on this exact hostname are kept.

    Returns:
        Normalized URLs in document order (duplicates preserved; the caller
        tracks visited pages).
    """
    links: list[str] = []
    for match in _ANCHOR_HREF_RE.finditer(body):
        href = html.unescape(match.group(1).strip())
        if not _is_crawlable_href(href):
            continue

        try:
            resolved = urljoin(base_url, href)
            parts = urlsplit(resolved)
            hostname = parts.hostname
        except ValueError:
            continue

        if parts.scheme not in _DEFAULT_PORTS:
            continue
        if hostname != allowed_host:
            continue

        path_and_query = parts.path + (f"?{parts.query}" if parts.query else "")
        if _SKIPPED_PATH_RE.search(path_and_query):
            continue
        if _ASSET_EXTENSION_RE.search(parts.path):
            continue

        links.append(normalize_url(resolved))
    return links


class LinkDiscoverer:
    """Breadth-first crawler bounded by a total page count.

    Attributes:
        max_pages: Upper bound on the number of URLs returned.
        settings:  Source of ``CRAWL_FETCH_TIMEOUT`` and
                   ``CRAWL_MAX_BODY_BYTES``.
        transport: Optional httpx transport (tests inject a mock).
    """

    def __init__(
        self,
        max_pages: Optional[int] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings: Settings = settings or get_settings()
        self.max_pages: int = max_pages or self.settings.CRAWL_MAX_PAGES
        self.transport = transport

    async def discover(self, entry_url: str) -> list[str]:
        """Return up to ``max_pages`` same-host page URLs reachable from *entry_url*.

        The entry URL is always the first element, even when it cannot be
        fetched or links nowhere.
        """
        entry_host = urlsplit(entry_url).hostname
        visited: set[str] = {normalize_url(entry_url)}
        queue: deque[str] = deque([entry_url])
        found: list[str] = [entry_url]

        timeout = self.settings.CRAWL_FETCH_TIMEOUT

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            while queue and len(found) < self.max_pages:
                current = queue.popleft()
                response = await self._fetch(client, current, timeout)
                if response is None:
                    continue

                try:
                    final_url = str(response.url)
                    if urlsplit(final_url).hostname != entry_host:
                        logger.debug(
                            "Redirected off-site to %s, skipping",
                            final_url,
                            extra={"action": "crawl_offsite", "target": current},
                        )
                        continue

                    landed = normalize_url(final_url)
                    if landed not in visited and len(found) < self.max_pages:
                        visited.add(landed)
                        found.append(landed)

                    content_type = response.headers.get("content-type", "")
                    if "text/html" not in content_type.lower():
                        continue

                    body = await self._read(response, current, timeout)
                finally:
                    await response.aclose()

                for link in extract_links(body, final_url, entry_host):
                    if len(found) >= self.max_pages:
                        break
                    if link in visited:
                        continue
                    visited.add(link)
                    found.append(link)
                    queue.append(link)

        logger.info(
            "Discovered %d pages",
            len(found),
            extra={"action": "crawl_discovered", "target": entry_url},
        )
        return found

    async def _fetch(
        self, client: httpx.AsyncClient, url: str, timeout: float
    ) -> Optional[httpx.Response]:
        """GET *url* as a stream; ``None`` on any network failure."""
        try:
            request = client.build_request(
                "GET",
                url,
                headers={"User-Agent": self.settings.crawler_user_agent},
            )
            return await asyncio.wait_for(
                client.send(request, stream=True),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug(
                "Crawl fetch failed: %r",
                exc,
                extra={"action": "crawl_fetch_failed", "target": url},
            )
            return None

    async def _read(self, response: httpx.Response, url: str, timeout: float) -> str:
        try:
            return await asyncio.wait_for(
                read_bounded_body(response, self.settings.CRAWL_MAX_BODY_BYTES),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.debug(
                "Crawl body read timed out",
                extra={"action": "crawl_read_timeout", "target": url},
            )
            return ""

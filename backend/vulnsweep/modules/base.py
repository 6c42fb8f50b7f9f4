"""
Base interface for all VulnSweep passive subdomain sources.

Every source adapter queries one third-party OSINT service and returns raw
hostnames.  Adapters never raise: :meth:`BaseSourceModule.fetch` catches
every failure at the adapter boundary and contributes an empty list, so a
broken or slow service cannot block or fail its siblings.  Normalisation
and root-domain filtering happen centrally in
:mod:`vulnsweep.engine.subdomains`.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Iterable, Optional

import httpx

logger = logging.getLogger(__name__)


class BaseSourceModule(ABC):
    """Abstract base class that every OSINT source adapter must implement.

    Subclasses **must** override :meth:`query` and set the class-level
    attributes ``name`` and ``description`` to meaningful values.

    Attributes:
        name:             Short unique identifier used as the provenance tag.
        description:      Human-readable one-liner describing the source.
        requires_api_key: Whether an external API key is needed at runtime.
        api_key_env_var:  Name of the environment variable holding the API key.
        read_timeout:     Overall deadline for one upstream query (seconds);
                          also the httpx read timeout.
    """

    name: str = "base"
    description: str = ""
    requires_api_key: bool = False
    api_key_env_var: str = ""
    read_timeout: float = 10.0

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if timeout is not None:
            self.read_timeout = timeout
        self.transport = transport

    @abstractmethod
    async def query(self, client: httpx.AsyncClient, domain: str) -> Iterable[str]:
        """Query the upstream service and yield raw hostnames.

        Args:
            client: A configured :class:`httpx.AsyncClient`.
            domain: The root domain (e.g. ``"example.com"``).

        Returns:
            Hostnames exactly as reported by the service.

        Raises:
            httpx.HTTPError: Any transport or status error; handled by
                :meth:`fetch`.
        """

    async def fetch(self, domain: str) -> list[str]:
        """Run :meth:`query` and return its hostnames, or ``[]`` on failure.

        The whole query, including reading the response body, is cancelled
        once ``read_timeout`` seconds have elapsed.
        """
        if not self.validate_config():
            logger.info("%s skipped: %s is not set", self.name, self.api_key_env_var)
            return []

        start: float = time.monotonic()
        try:
            names = await asyncio.wait_for(self._query_names(domain), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "%s exceeded its %.1fs deadline", self.name, self.read_timeout
            )
            return []
        except httpx.TimeoutException as exc:
            logger.warning("%s request timed out: %s", self.name, exc)
            return []
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "%s returned HTTP %s: %s",
                self.name,
                exc.response.status_code,
                exc,
            )
            return []
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s query failed: %s", self.name, exc)
            return []

        logger.info(
            "%s returned %d names in %.1fs",
            self.name,
            len(names),
            time.monotonic() - start,
        )
        return names

    async def _query_names(self, domain: str) -> list[str]:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=min(10.0, self.read_timeout),
                read=self.read_timeout,
                write=10.0,
                pool=10.0,
            ),
            follow_redirects=True,
            transport=self.transport,
        ) as client:
            return [name for name in await self.query(client, domain) if name]

    def validate_config(self) -> bool:
        """Check whether all prerequisites (API keys, etc.) are satisfied.

        Returns:
            ``True`` when the source is ready to run, ``False`` otherwise.
        """
        if self.requires_api_key:
            return bool(os.getenv(self.api_key_env_var))
        return True

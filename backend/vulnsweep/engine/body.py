"""
Bounded response body reader.

Targets are untrusted: a server may send a false ``Content-Length`` or an
endless chunked stream.  :func:`read_bounded_body` enforces a hard byte
ceiling while streaming and always hands back whatever text it could
decode, never an exception.
"""

from __future__ import annotations

import codecs
from typing import Optional

import httpx

from vulnsweep.core.logging import get_logger

logger = get_logger(__name__)

_FALLBACK_ENCODING: str = "utf-8"


def _incremental_decoder(response: httpx.Response) -> codecs.IncrementalDecoder:
    """Build a lenient incremental decoder from the response charset."""
    encoding = response.charset_encoding or _FALLBACK_ENCODING
    try:
        factory = codecs.getincrementaldecoder(encoding)
    except LookupError:
        factory = codecs.getincrementaldecoder(_FALLBACK_ENCODING)
    return factory(errors="replace")


async def read_bounded_body(
    response: Optional[httpx.Response], max_bytes: int
) -> str:
    """Stream *response* into a string of at most *max_bytes* source bytes.

    Once the cumulative byte count passes *max_bytes*, the overshoot is
    trimmed from the last chunk, only the allowed prefix is decoded, and
    the response is closed without reading further.

    Args:
        response:  A streaming :class:`httpx.Response`, or ``None``.
        max_bytes: Hard ceiling on the number of body bytes consumed.

    Returns:
        The decoded (possibly truncated) body.  ``""`` when there is no
        response; the partial text when the stream breaks mid-way.
    """
    if response is None:
        return ""

    decoder = _incremental_decoder(response)
    parts: list[str] = []
    total_bytes: int = 0

    try:
        async for chunk in response.aiter_bytes():
            total_bytes += len(chunk)
            if total_bytes > max_bytes:
                allowed = chunk[: len(chunk) - (total_bytes - max_bytes)]
                parts.append(decoder.decode(allowed, final=True))
                logger.debug(
                    "Body truncated at %d bytes",
                    max_bytes,
                    extra={"action": "body_truncated", "target": _safe_url(response)},
                )
                break
            parts.append(decoder.decode(chunk))
        else:
            parts.append(decoder.decode(b"", final=True))
    except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
        logger.debug(
            "Body stream failed after %d bytes: %s",
            total_bytes,
            exc,
            extra={"action": "body_partial", "target": _safe_url(response)},
        )
    finally:
        try:
            await response.aclose()
        except (httpx.HTTPError, httpx.StreamError, RuntimeError, OSError):
            pass

    return "".join(parts)


def _safe_url(response: httpx.Response) -> str:
    """Return the response URL, or ``-`` when no request is attached."""
    try:
        return str(response.url)
    except RuntimeError:
        return "-"

"""
Structured logging for VulnSweep.

Every line carries ``action`` and ``target`` fields next to the message, so
scan traffic can be grepped per URL or per pipeline step:

    2026-10-19T12:00:00+0000 | INFO     | vulnsweep.engine.crawler | action=crawl_discovered | target=https://example.com/ | Discovered 12 pages

Usage::

    from vulnsweep.core.logging import configure_logging, get_logger

    configure_logging()                # once, from the application lifespan
    logger = get_logger(__name__)
    logger.info("Page scanned", extra={"action": "page_scanned", "target": url})
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from vulnsweep.config import get_settings

# ── Constants ────────────────────────────────────────────────────────────────

_ROOT_LOGGER_NAME: str = "vulnsweep"
_LOG_FORMAT: str = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "action=%(action)s | target=%(target)s | %(message)s"
)
_DATE_FORMAT: str = "%Y-%m-%dT%H:%M:%S%z"

# Targets are untrusted URLs.
_MAX_TARGET_CHARS: int = 200

_QUIET_LOGGERS: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore")


# ── Formatter ────────────────────────────────────────────────────────────────

class StructuredFormatter(logging.Formatter):
    """Fill in ``action`` / ``target`` and keep ``target`` on a single line.

    Records logged without ``extra`` get ``-`` for both fields.  A target
    longer than ``_MAX_TARGET_CHARS`` is clipped and control characters are
    escaped so a hostile URL cannot forge extra log lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "action"):
            record.action = "-"
        record.target = _clean_target(getattr(record, "target", "-"))
        return super().format(record)


def _clean_target(value: object) -> str:
    text = str(value)
    if len(text) > _MAX_TARGET_CHARS:
        text = f"{text[:_MAX_TARGET_CHARS]}..."
    return text.replace("\r", "\\r").replace("\n", "\\n")


# ── Public API ───────────────────────────────────────────────────────────────

def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stdout handler with :class:`StructuredFormatter` to ``vulnsweep``.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Explicit level name.  Defaults to ``DEBUG`` when
            ``settings.DEBUG`` is set, otherwise ``INFO``.
    """
    settings = get_settings()
    level = level or ("DEBUG" if settings.DEBUG else "INFO")

    app_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    app_logger.setLevel(level)

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        app_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.info(
        "Logging configured at %s level",
        level,
        extra={"action": "logging_init", "target": settings.APP_NAME},
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``vulnsweep`` namespace.

    ``vulnsweep.*`` module names are used unchanged; anything else is
    prefixed, so ``get_logger("worker")`` yields ``vulnsweep.worker``.
    """
    if name == _ROOT_LOGGER_NAME or name.startswith(f"{_ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")

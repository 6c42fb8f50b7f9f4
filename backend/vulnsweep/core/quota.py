"""
Quota gate: per-key fixed-window request limiting.

Every scan, crawl, and discovery request is checked against the gate
before any network work begins.  The limiter is in-memory and
process-local; a deployment with several workers should put a shared
store behind the same :meth:`QuotaLimiter.check` signature.

Example::

    limiter = QuotaLimiter()
    decision = limiter.check("scan:203.0.113.7", QuotaLimits(10, 60))
    if not decision.allowed:
        ...  # return 429 with decision.resets_at
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional


@dataclass(frozen=True)
class QuotaLimits:
    """Limits applied to a single key.

    Attributes:
        max_requests:   Requests permitted per window.
        window_seconds: Length of the fixed window.
    """

    max_requests: int
    window_seconds: int

    def __post_init__(self) -> None:
        if self.max_requests <= 0:
            raise ValueError("max_requests must be a positive integer.")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be a positive integer.")


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of a quota check.

    Attributes:
        allowed:   ``True`` when the request may proceed.
        limit:     Requests permitted per window.
        remaining: Requests left in the current window after this one.
        resets_at: UTC time at which the current window ends.
    """

    allowed: bool
    limit: int
    remaining: int
    resets_at: datetime

    def retry_after_seconds(self, now: Optional[datetime] = None) -> int:
        """Whole seconds until the window resets (never negative)."""
        now = now or datetime.now(timezone.utc)
        delta = (self.resets_at - now).total_seconds()
        return max(0, int(delta + 0.999))


class QuotaLimiter:
    """In-memory fixed-window quota limiter.

    Each key gets its own window that starts at the first request and lasts
    ``window_seconds``.  Requests beyond ``max_requests`` inside the window
    are rejected without consuming anything.  Expired windows are dropped
    at most once every ``sweep_interval`` seconds, so the map only holds
    keys seen recently.

    Attributes:
        clock:          Callable returning the current POSIX timestamp;
                        injectable for tests.
        sweep_interval: Minimum seconds between two eviction sweeps.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sweep_interval: float = 60.0,
    ) -> None:
        self.clock = clock
        self.sweep_interval = sweep_interval
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_sweep: float = clock()

    def tracked_keys(self) -> int:
        """Number of keys currently holding a window."""
        with self._lock:
            return len(self._windows)

    def check(self, key: str, limits: QuotaLimits) -> QuotaDecision:
        """Count one request against *key* and report whether it is allowed.

        Args:
            key:    Requester identity, e.g. ``"crawl:203.0.113.7"``.
            limits: Window size and request ceiling for this key.

        Returns:
            A :class:`QuotaDecision`.
        """
        now: float = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.sweep_interval:
                self._sweep(now)

            window = self._windows.get(key)
            if window is None or now >= window.started_at + limits.window_seconds:
                window = _Window(started_at=now, expires_at=now + limits.window_seconds)
                self._windows[key] = window

            resets_at = datetime.fromtimestamp(
                window.started_at + limits.window_seconds, tz=timezone.utc
            )

            if window.count >= limits.max_requests:
                return QuotaDecision(
                    allowed=False,
                    limit=limits.max_requests,
                    remaining=0,
                    resets_at=resets_at,
                )

            window.count += 1
            return QuotaDecision(
                allowed=True,
                limit=limits.max_requests,
                remaining=limits.max_requests - window.count,
                resets_at=resets_at,
            )

    def reset(self, key: Optional[str] = None) -> None:
        """Reset one or all windows.

        Args:
            key: If provided, only the window for this key is removed.
                 If ``None``, all windows are cleared.
        """
        with self._lock:
            if key is not None:
                self._windows.pop(key, None)
            else:
                self._windows.clear()

    def _sweep(self, now: float) -> None:
        # Caller holds the lock.
        expired = [key for key, window in self._windows.items() if now >= window.expires_at]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now


class _Window:
    """Internal state for a single fixed window."""

    __slots__ = ("started_at", "expires_at", "count")

    def __init__(self, started_at: float, expires_at: float, count: int = 0) -> None:
        self.started_at: float = started_at
        self.expires_at: float = expires_at
        self.count: int = count

"""
Error taxonomy for VulnSweep.

Only two conditions ever escape the engine as exceptions:

* :class:`TargetUnreachableError` -- raised by the single-URL scan entry
  point when the target cannot be fetched.  Inside crawls and subdomain
  discovery the same condition silently drops the page or host.
* :class:`QuotaExceededError` -- raised before any scanning work starts
  when the caller has used up its quota window.

Check failures, source-adapter failures, and oversize responses are handled
at their own boundaries and never surface here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vulnsweep.core.quota import QuotaDecision


class VulnSweepError(Exception):
    """Base class for all errors raised by VulnSweep."""


class TargetUnreachableError(VulnSweepError):
    """The target could not be reached (DNS, connect, TLS, or timeout).

    Attributes:
        url:    The URL that was being fetched.
        reason: Short description of the underlying failure.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not reach {url}: {reason}")


class QuotaExceededError(VulnSweepError):
    """The caller exhausted its scan quota for the current window.

    Attributes:
        decision: The :class:`~vulnsweep.core.quota.QuotaDecision` that
                  rejected the request, including ``resets_at``.
    """

    def __init__(self, key: str, decision: "QuotaDecision") -> None:
        self.key = key
        self.decision = decision
        super().__init__(
            f"Quota exceeded for '{key}', resets at {decision.resets_at.isoformat()}"
        )

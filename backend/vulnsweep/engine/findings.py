"""
Finding model and the severity ordering shared by every scan path.

A :class:`Finding` is produced by a check or probe and never mutated
afterwards.  The helpers in this module are the only place where findings
are sorted, counted, or merged, so single-page scans, crawls, and the API
layer all agree on ordering and on the shape of a summary.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Iterable


class Severity(str, Enum):
    """Ordinal risk level; ``CRITICAL`` is the highest risk.

    Attributes:
        CRITICAL: Rank 0.
        HIGH:     Rank 1.
        MEDIUM:   Rank 2.
        LOW:      Rank 3.
        INFO:     Rank 4.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort key: lower rank means higher risk."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
    Severity.INFO: 4,
}


@dataclass(frozen=True)
class Finding:
    """A single detected security issue.

    Attributes:
        id:          Stable identifier, used as the cross-page dedup key
                     (e.g. ``"hsts-missing"``).
        title:       Short human-readable title.
        description: What was observed.
        severity:    :class:`Severity` of the issue.
        category:    Grouping such as ``headers`` or ``configuration``.
        remediation: How to fix it.
        evidence:    Optional raw observation backing the finding.
    """

    id: str
    title: str
    description: str
    severity: Severity
    category: str
    remediation: str
    evidence: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict with the severity as its string value."""
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


def empty_summary() -> dict[str, int]:
    """Return a summary with every count at zero."""
    summary = {severity.value: 0 for severity in Severity}
    summary["total"] = 0
    return summary


def sort_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Return *findings* ordered from critical to info.

    The sort is stable, so findings of equal severity keep their input order.
    """
    return sorted(findings, key=lambda finding: finding.severity.rank)


def summarize(findings: Iterable[Finding]) -> dict[str, int]:
    """Count findings per severity plus a ``total``."""
    summary = empty_summary()
    for finding in findings:
        summary[finding.severity.value] += 1
        summary["total"] += 1
    return summary


def merge_findings(finding_lists: Iterable[Iterable[Finding]]) -> list[Finding]:
    """Merge several finding lists, keeping the first occurrence of each id.

    When two pages report the same id with different evidence the earlier
    one is kept unchanged.

    Returns:
        The deduplicated findings, severity-sorted.
    """
    seen: set[str] = set()
    merged: list[Finding] = []
    for findings in finding_lists:
        for finding in findings:
            if finding.id in seen:
                continue
            seen.add(finding.id)
            merged.append(finding)
    return sort_findings(merged)

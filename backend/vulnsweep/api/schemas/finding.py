"""
Pydantic v2 schemas for findings and severity summaries.

These mirror :class:`~vulnsweep.engine.findings.Finding` and the summary
dict produced by :func:`~vulnsweep.engine.findings.summarize`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from vulnsweep.engine.findings import Finding, Severity


class FindingResponse(BaseModel):
    """A single detected issue.

    Attributes:
        id: Stable identifier, identical across pages for the same issue.
        title: Short human-readable title.
        description: What was observed.
        severity: ``critical``, ``high``, ``medium``, ``low`` or ``info``.
        category: Grouping such as ``headers`` or ``disclosure``.
        remediation: How to fix it.
        evidence: Raw observation backing the finding, may be empty.
    """

    id: str
    title: str
    description: str
    severity: Severity
    category: str
    remediation: str
    evidence: str = ""

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_finding(cls, finding: Finding) -> "FindingResponse":
        return cls.model_validate(finding)


class SeveritySummary(BaseModel):
    """Count of findings per severity plus the overall total."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    total: int = 0

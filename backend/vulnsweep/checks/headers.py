"""
HTTP security header checks.

Each check inspects the response headers of an already-fetched page and
returns a :class:`~vulnsweep.engine.findings.Finding` when a critical
security header is missing or misconfigured.  Finding ids are stable so a
header missing on every crawled page is reported once.
"""

from __future__ import annotations

from typing import Mapping, Optional

from vulnsweep.engine.findings import Finding, Severity

_ONE_YEAR_SECONDS: int = 31536000


def _get(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that works for plain dicts too."""
    value = headers.get(name)
    if value is not None:
        return value
    lower = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lower:
            return candidate
    return None


def check_hsts(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
    """Strict-Transport-Security must be present with max-age >= 1 year."""
    if not url.lower().startswith("https://"):
        return None

    value = _get(headers, "Strict-Transport-Security")
    if value is None:
        return Finding(
            id="hsts-missing",
            title="Missing Strict-Transport-Security header",
            description="The response does not instruct browsers to use HTTPS only.",
            severity=Severity.MEDIUM,
            category="headers",
            remediation="Add HSTS header with max-age >= 31536000 and includeSubDomains",
            evidence="Header 'Strict-Transport-Security' is not present in the response.",
        )

    lower_value = value.lower()
    if "max-age=" in lower_value:
        try:
            max_age = int(lower_value.split("max-age=")[1].split(";")[0].strip())
        except (ValueError, IndexError):
            return None
        if max_age < _ONE_YEAR_SECONDS:
            return Finding(
                id="hsts-short-max-age",
                title="Short HSTS max-age",
                description=f"HSTS max-age is {max_age} seconds (< 1 year).",
                severity=Severity.LOW,
                category="headers",
                remediation="Increase HSTS max-age to at least 31536000",
                evidence=f"Strict-Transport-Security: {value}",
            )
    return None


def check_csp(url: str, headers: Mapping[str, str], body: str) -> Optional[Finding]:
    """Content-Security-Policy must be present."""
    if _get(headers, "Content-Security-Policy") is not None:
        return None
    return Finding(
        id="csp-missing",
        title="Missing Content-Security-Policy header",
        description="No Content-Security-Policy restricts where scripts and resources load from.",
        severity=Severity.MEDIUM,
        category="headers",
        remediation="Add a Content-Security-Policy header to prevent XSS and data injection",
        evidence="Header 'Content-Security-Policy' is not present in the response.",
    )


def check_content_type_options(
    url: str, headers: Mapping[str, str], body: str
) -> Optional[Finding]:
    """X-Content-Type-Options must be ``nosniff``."""
    value = _get(headers, "X-Content-Type-Options")
    if value is not None and "nosniff" in value.lower():
        return None
    return Finding(
        id="content-type-options-missing",
        title="Missing X-Content-Type-Options: nosniff",
        description="Browsers may MIME-sniff responses into executable content types.",
        severity=Severity.LOW,
        category="headers",
        remediation="Add 'X-Content-Type-Options: nosniff' to prevent MIME-type sniffing",
        evidence=f"X-Content-Type-Options: {value}" if value else "Header not present.",
    )


def check_clickjacking(
    url: str, headers: Mapping[str, str], body: str
) -> Optional[Finding]:
    """Framing must be restricted by X-Frame-Options or CSP frame-ancestors."""
    xfo = _get(headers, "X-Frame-Options")
    csp = (_get(headers, "Content-Security-Policy") or "").lower()
    if "frame-ancestors" in csp:
        return None
    if xfo is not None:
        lower_value = xfo.strip().lower()
        if lower_value in ("deny", "sameorigin") or lower_value.startswith("allow-from"):
            return None
        evidence = f"Invalid X-Frame-Options value: '{xfo}'"
    else:
        evidence = "Neither X-Frame-Options nor CSP frame-ancestors is set."
    return Finding(
        id="clickjacking-unprotected",
        title="Page can be framed (clickjacking)",
        description="The page does not restrict which origins may embed it in a frame.",
        severity=Severity.MEDIUM,
        category="headers",
        remediation="Add 'X-Frame-Options: DENY' or 'SAMEORIGIN', or a CSP frame-ancestors directive",
        evidence=evidence,
    )


def check_referrer_policy(
    url: str, headers: Mapping[str, str], body: str
) -> Optional[Finding]:
    if _get(headers, "Referrer-Policy") is not None:
        return None
    return Finding(
        id="referrer-policy-missing",
        title="Missing Referrer-Policy header",
        description="Full URLs may leak to third parties through the Referer header.",
        severity=Severity.LOW,
        category="headers",
        remediation="Add 'Referrer-Policy: strict-origin-when-cross-origin' or stricter",
    )


def check_permissions_policy(
    url: str, headers: Mapping[str, str], body: str
) -> Optional[Finding]:
    if _get(headers, "Permissions-Policy") is not None:
        return None
    return Finding(
        id="permissions-policy-missing",
        title="Missing Permissions-Policy header",
        description="Browser features such as camera and geolocation are not restricted.",
        severity=Severity.INFO,
        category="headers",
        remediation="Add a Permissions-Policy header to restrict browser feature access",
    )


def check_technology_disclosure(
    url: str, headers: Mapping[str, str], body: str
) -> Optional[Finding]:
    """Server / X-Powered-By headers should not advertise versions."""
    disclosed: list[str] = []
    for name in ("Server", "X-Powered-By", "X-AspNet-Version"):
        value = _get(headers, name)
        if value and any(char.isdigit() for char in value):
            disclosed.append(f"{name}: {value}")
    if not disclosed:
        return None
    return Finding(
        id="technology-version-disclosure",
        title="Server software version disclosed",
        description="Response headers reveal software names and versions.",
        severity=Severity.LOW,
        category="information-disclosure",
        remediation="Strip version numbers from Server and X-Powered-By headers",
        evidence="; ".join(disclosed),
    )

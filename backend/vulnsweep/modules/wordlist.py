"""
Brute-force prefix dictionary for active subdomain discovery.

Each prefix is joined to the root domain (``{prefix}.{root}``) and pushed
through the same DNS gate and reachability probe as passive candidates.
The list covers the names most organisations actually use.
"""

from __future__ import annotations

BRUTE_FORCE_SOURCE: str = "brute-force"

BRUTE_FORCE_PREFIXES: tuple[str, ...] = (
    "www", "mail", "api", "app", "dev", "staging", "admin", "cdn",
    "blog", "shop", "store", "docs", "help", "support", "portal",
    "m", "mobile", "test", "beta", "demo", "web", "ns1", "ns2",
    "ftp", "vpn", "remote", "secure", "auth", "login", "dashboard",
    "status", "monitor", "git", "gitlab", "jenkins", "ci", "media",
    "static", "assets", "img", "webmail", "smtp", "intranet", "internal",
    "qa", "uat", "preprod", "sandbox", "grafana", "sso",
)

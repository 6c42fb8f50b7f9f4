"""
Default detection battery.

The engine treats checks and probes as opaque callables; these are the ones
wired in when a :class:`~vulnsweep.engine.checks.CheckRunner` is built
without an explicit list.
"""

from vulnsweep.checks.headers import (
    check_clickjacking,
    check_content_type_options,
    check_csp,
    check_hsts,
    check_permissions_policy,
    check_referrer_policy,
    check_technology_disclosure,
)
from vulnsweep.checks.probes import probe_security_txt

DEFAULT_CHECKS = [
    check_hsts,
    check_csp,
    check_content_type_options,
    check_clickjacking,
    check_referrer_policy,
    check_permissions_policy,
    check_technology_disclosure,
]

DEFAULT_PROBES = [
    probe_security_txt,
]

__all__: list[str] = [
    "DEFAULT_CHECKS",
    "DEFAULT_PROBES",
]

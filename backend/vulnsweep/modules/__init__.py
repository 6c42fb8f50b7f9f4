"""
Source Registry -- import all OSINT adapters for auto-registration.

Importing this package causes every concrete adapter class to be loaded
and, through the :func:`@SourceRegistry.register <SourceRegistry.register>`
decorator, automatically registered in the central source registry.
Downstream code only needs to ``import vulnsweep.modules`` to have the full
catalogue available.
"""

from vulnsweep.modules.registry import SourceRegistry
from vulnsweep.modules.base import BaseSourceModule
from vulnsweep.modules.crtsh import CrtshModule
from vulnsweep.modules.alienvault import AlienVaultModule
from vulnsweep.modules.hackertarget import HackerTargetModule
from vulnsweep.modules.anubis import AnubisModule
from vulnsweep.modules.webarchive import WebArchiveModule
from vulnsweep.modules.wordlist import BRUTE_FORCE_PREFIXES, BRUTE_FORCE_SOURCE

__all__: list[str] = [
    "SourceRegistry",
    "BaseSourceModule",
    "CrtshModule",
    "AlienVaultModule",
    "HackerTargetModule",
    "AnubisModule",
    "WebArchiveModule",
    "BRUTE_FORCE_PREFIXES",
    "BRUTE_FORCE_SOURCE",
]

"""
printwatch - Printer Discovery.

Architecture:
    discovery/
    ├── ranges.py  # CIDR parsing and host enumeration
    ├── prober.py  # Is this host a printer?
    └── engine.py  # Concurrent sweep with soft cancellation

Usage:
    from printwatch.discovery import DiscoveryEngine

    engine = DiscoveryEngine(SnmpConfig(), concurrency=24)
    result = await engine.run("10.1.20.0/24", community="public")
"""

from .ranges import CidrRange, FALLBACK_DISCOVERY_CIDR, default_discovery_cidr
from .prober import normalize_community, probe_printer
from .engine import DiscoveryEngine, DiscoveryRunResult

__all__ = [
    'CidrRange',
    'FALLBACK_DISCOVERY_CIDR',
    'default_discovery_cidr',
    'normalize_community',
    'probe_printer',
    'DiscoveryEngine',
    'DiscoveryRunResult',
]

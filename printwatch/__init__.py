"""
printwatch - SNMP Printer Monitoring Engine.

Finds printers on a network range, reads their page counters and
toner levels over SNMP v2c, and classifies Ricoh devices so the right
counters are used.

Architecture:
    printwatch/
    ├── errors.py     # PrintwatchError hierarchy
    ├── config.py     # SnmpConfig / DiscoveryConfig, YAML loading
    ├── models.py     # PrinterRecord, CounterOidSet, CounterSnapshot
    ├── oids.py       # SNMP OID constants
    ├── counters.py   # Counter resolution and mappings
    ├── profiler.py   # Ricoh identification
    ├── events.py     # Discovery events and console printer
    ├── registry.py   # Known printers, merge and name backfill
    ├── poller.py     # Single-printer poll, counter OID crawl
    ├── cli.py        # Command line interface
    ├── snmp/         # Oid, SnmpValue, SnmpV2cClient, MockSnmpClient
    └── discovery/    # CIDR ranges, prober, concurrent engine

Quick Start:
    from printwatch import DiscoveryEngine, SnmpConfig, poll_printer

    engine = DiscoveryEngine(SnmpConfig(community="public"))
    result = await engine.run("192.168.1.0/24")

    for record in result.printers:
        poll = await poll_printer(record)
        print(record.host, poll.resolution.snapshot.total)
"""

__version__ = "0.3.0"

from .errors import (
    PrintwatchError,
    SnmpError,
    SnmpAuthError,
    SnmpTimeoutError,
    SnmpFailureError,
    UnsupportedModelError,
    MissingCountersError,
    CounterResetError,
    DiscoveryFailureError,
    StorageAction,
    StorageError,
    OidParseError,
    CidrParseError,
)
from .config import SnmpConfig, DiscoveryConfig, PrintwatchConfig
from .models import (
    PrinterStatus,
    PrinterRecord,
    CounterOidSet,
    CounterOids,
    CounterSnapshot,
)
from .counters import (
    CounterKind,
    CounterMode,
    CounterResolution,
    CounterWarning,
    WarningCode,
    resolve_counters,
    snapshot_delta,
    default_counter_oids,
)
from .profiler import (
    CounterStrategy,
    RicohProfile,
    VendorMatch,
    identify_device,
)
from .events import EventEmitter, EventType, ConsoleEventPrinter
from .registry import PrinterRegistry
from .poller import PollResult, poll_printer, crawl_counter_oids
from .discovery import CidrRange, DiscoveryEngine, DiscoveryRunResult, probe_printer

__all__ = [
    # Errors
    'PrintwatchError',
    'SnmpError',
    'SnmpAuthError',
    'SnmpTimeoutError',
    'SnmpFailureError',
    'UnsupportedModelError',
    'MissingCountersError',
    'CounterResetError',
    'DiscoveryFailureError',
    'StorageAction',
    'StorageError',
    'OidParseError',
    'CidrParseError',
    # Config
    'SnmpConfig',
    'DiscoveryConfig',
    'PrintwatchConfig',
    # Models
    'PrinterStatus',
    'PrinterRecord',
    'CounterOidSet',
    'CounterOids',
    'CounterSnapshot',
    # Counters
    'CounterKind',
    'CounterMode',
    'CounterResolution',
    'CounterWarning',
    'WarningCode',
    'resolve_counters',
    'snapshot_delta',
    'default_counter_oids',
    # Profiler
    'CounterStrategy',
    'RicohProfile',
    'VendorMatch',
    'identify_device',
    # Events / registry
    'EventEmitter',
    'EventType',
    'ConsoleEventPrinter',
    'PrinterRegistry',
    # Polling
    'PollResult',
    'poll_printer',
    'crawl_counter_oids',
    # Discovery
    'CidrRange',
    'DiscoveryEngine',
    'DiscoveryRunResult',
    'probe_printer',
]

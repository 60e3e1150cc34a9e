"""
printwatch - Data Models.

Dataclasses for printer records, counter mappings and snapshots.
All record types serialize to plain dicts (to_dict/from_dict) so an
external store can round-trip them without knowing the types.

Design Principles:
- Optional fields are true optionals (None when unknown)
- Absent keys load with sensible defaults (port 161, empty OID lists)
- Enums serialize as their string values
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any
import json

from .snmp.oid import Oid
from .snmp.messages import SnmpAddress


class PrinterStatus(str, Enum):
    """Printer reachability status."""
    UNKNOWN = "unknown"
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"


# =============================================================================
# Printer records
# =============================================================================

@dataclass
class PrinterRecord:
    """
    A monitored printer.

    Created by discovery (id "snmp-<host>") or manual entry
    (id "manual-<host>"). Merged by SNMP host on re-discovery.
    """
    printer_id: str                              # Stable identity key
    host: Optional[str] = None                   # IP or hostname shown to users
    model: Optional[str] = None                  # Display name / model string
    sys_object_id: Optional[str] = None          # sysObjectID as dotted text
    snmp_address: Optional[SnmpAddress] = None   # Where to poll
    community: Optional[str] = None              # Per-printer community override
    status: PrinterStatus = PrinterStatus.UNKNOWN
    last_seen: Optional[int] = None              # Epoch seconds

    @property
    def is_manual(self) -> bool:
        return self.printer_id.startswith("manual-")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "printer_id": self.printer_id,
            "host": self.host,
            "model": self.model,
            "sys_object_id": self.sys_object_id,
            "snmp_address": self.snmp_address.to_dict() if self.snmp_address else None,
            "community": self.community,
            "status": self.status.value,
            "last_seen": self.last_seen,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PrinterRecord':
        """Create from dictionary."""
        address = data.get("snmp_address")
        status = data.get("status") or PrinterStatus.UNKNOWN.value
        return cls(
            printer_id=data["printer_id"],
            host=data.get("host"),
            model=data.get("model"),
            sys_object_id=data.get("sys_object_id"),
            snmp_address=SnmpAddress.from_dict(address) if address else None,
            community=data.get("community"),
            status=PrinterStatus(status),
            last_seen=data.get("last_seen"),
        )

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# =============================================================================
# Counter mapping and snapshots
# =============================================================================

@dataclass
class CounterOidSet:
    """Ordered candidate OIDs per counter category."""
    bw: List[Oid] = field(default_factory=list)
    color: List[Oid] = field(default_factory=list)
    total: List[Oid] = field(default_factory=list)

    def all_oids(self) -> List[Oid]:
        return [*self.bw, *self.color, *self.total]

    def is_empty(self) -> bool:
        return not (self.bw or self.color or self.total)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bw": [str(oid) for oid in self.bw],
            "color": [str(oid) for oid in self.color],
            "total": [str(oid) for oid in self.total],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CounterOidSet':
        """Create from dictionary; absent categories load as empty."""
        return cls(
            bw=[Oid.parse(text) for text in data.get("bw") or []],
            color=[Oid.parse(text) for text in data.get("color") or []],
            total=[Oid.parse(text) for text in data.get("total") or []],
        )


@dataclass
class CounterOids:
    """The OID that produced each resolved counter (audit trail)."""
    bw: Optional[str] = None
    color: Optional[str] = None
    total: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"bw": self.bw, "color": self.color, "total": self.total}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CounterOids':
        return cls(
            bw=data.get("bw"),
            color=data.get("color"),
            total=data.get("total"),
        )


@dataclass
class CounterSnapshot:
    """Normalized page counts at a point in time."""
    timestamp: int                               # Epoch seconds
    bw: Optional[int] = None
    color: Optional[int] = None
    total: Optional[int] = None
    source_oids: CounterOids = field(default_factory=CounterOids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "bw": self.bw,
            "color": self.color,
            "total": self.total,
            "source_oids": self.source_oids.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CounterSnapshot':
        return cls(
            timestamp=data["timestamp"],
            bw=data.get("bw"),
            color=data.get("color"),
            total=data.get("total"),
            source_oids=CounterOids.from_dict(data.get("source_oids") or {}),
        )


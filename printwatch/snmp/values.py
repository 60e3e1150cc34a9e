"""
printwatch - SNMP value model.

Protocol-level scalars are carried as a tagged SnmpValue (kind + payload)
so the rest of the engine never touches pysnmp/pyasn1 objects directly.
Conversion from pysnmp types lives in parsers.py.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from .oid import Oid


class ValueKind(str, Enum):
    """SNMP value kinds."""
    NULL = "null"
    INTEGER = "integer"
    UNSIGNED32 = "unsigned32"
    COUNTER32 = "counter32"
    COUNTER64 = "counter64"
    TIMETICKS = "timeticks"
    OCTET_STRING = "octet_string"
    OBJECT_IDENTIFIER = "object_identifier"
    IP_ADDRESS = "ip_address"
    OPAQUE = "opaque"
    OTHER = "other"

    # SNMPv2 exception sentinels
    NO_SUCH_OBJECT = "no_such_object"
    NO_SUCH_INSTANCE = "no_such_instance"
    END_OF_MIB_VIEW = "end_of_mib_view"


NUMERIC_KINDS = frozenset({
    ValueKind.INTEGER,
    ValueKind.UNSIGNED32,
    ValueKind.COUNTER32,
    ValueKind.COUNTER64,
})

# Integer payloads; TimeTicks is a duration, not a count
INTEGER_KINDS = NUMERIC_KINDS | {ValueKind.TIMETICKS}

BYTES_KINDS = frozenset({
    ValueKind.OCTET_STRING,
    ValueKind.OPAQUE,
})

MISSING_KINDS = frozenset({
    ValueKind.NULL,
    ValueKind.NO_SUCH_OBJECT,
    ValueKind.NO_SUCH_INSTANCE,
    ValueKind.END_OF_MIB_VIEW,
})

_SENTINEL_LABELS = {
    ValueKind.NULL: "null",
    ValueKind.NO_SUCH_OBJECT: "noSuchObject",
    ValueKind.NO_SUCH_INSTANCE: "noSuchInstance",
    ValueKind.END_OF_MIB_VIEW: "endOfMibView",
}


@dataclass(frozen=True)
class SnmpValue:
    """
    Tagged SNMP value.

    Payload by kind:
        numeric kinds      -> int
        octet string/opaque/ip address -> bytes
        object identifier  -> Oid
        other              -> str (diagnostic label)
        null and sentinels -> None
    """
    kind: ValueKind
    value: Any = None

    # Constructors -----------------------------------------------------------

    @classmethod
    def null(cls) -> 'SnmpValue':
        return cls(ValueKind.NULL)

    @classmethod
    def integer(cls, value: int) -> 'SnmpValue':
        return cls(ValueKind.INTEGER, int(value))

    @classmethod
    def unsigned32(cls, value: int) -> 'SnmpValue':
        return cls(ValueKind.UNSIGNED32, int(value))

    @classmethod
    def counter32(cls, value: int) -> 'SnmpValue':
        return cls(ValueKind.COUNTER32, int(value))

    @classmethod
    def counter64(cls, value: int) -> 'SnmpValue':
        return cls(ValueKind.COUNTER64, int(value))

    @classmethod
    def timeticks(cls, value: int) -> 'SnmpValue':
        return cls(ValueKind.TIMETICKS, int(value))

    @classmethod
    def octet_string(cls, value: Union[bytes, str]) -> 'SnmpValue':
        if isinstance(value, str):
            value = value.encode("utf-8")
        return cls(ValueKind.OCTET_STRING, bytes(value))

    @classmethod
    def opaque(cls, value: bytes) -> 'SnmpValue':
        return cls(ValueKind.OPAQUE, bytes(value))

    @classmethod
    def ip_address(cls, value: bytes) -> 'SnmpValue':
        return cls(ValueKind.IP_ADDRESS, bytes(value))

    @classmethod
    def object_identifier(cls, value: Union[Oid, str]) -> 'SnmpValue':
        return cls(ValueKind.OBJECT_IDENTIFIER, Oid.coerce(value))

    @classmethod
    def other(cls, label: str) -> 'SnmpValue':
        return cls(ValueKind.OTHER, label)

    # Accessors --------------------------------------------------------------

    def as_unsigned(self) -> Optional[int]:
        """Numeric value, or None for non-numeric kinds and negative integers."""
        if self.kind not in NUMERIC_KINDS:
            return None
        if self.value is None or self.value < 0:
            return None
        return self.value

    def as_text(self) -> Optional[str]:
        """Lossy UTF-8 decode of octet string and opaque payloads."""
        if self.kind not in BYTES_KINDS:
            return None
        return self.value.decode("utf-8", errors="replace")

    def is_missing(self) -> bool:
        return self.kind in MISSING_KINDS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"type": self.kind.value, "value": str(self)}

    def __str__(self) -> str:
        if self.kind in _SENTINEL_LABELS:
            return _SENTINEL_LABELS[self.kind]
        if self.kind in INTEGER_KINDS:
            return str(self.value)
        if self.kind == ValueKind.OCTET_STRING:
            return self.as_text()
        if self.kind == ValueKind.OPAQUE:
            return "0x" + self.value.hex()
        if self.kind == ValueKind.IP_ADDRESS:
            if len(self.value) == 4:
                return ".".join(str(b) for b in self.value)
            return "0x" + self.value.hex()
        if self.kind == ValueKind.OBJECT_IDENTIFIER:
            return str(self.value)
        return str(self.value)


@dataclass(frozen=True)
class SnmpVarBind:
    """
    One (identifier, value) pair from a response.

    oid is None when the agent returned an identifier that could not be
    parsed as numeric text.
    """
    oid: Optional[Oid]
    value: SnmpValue

    def to_dict(self) -> Dict[str, Any]:
        return {
            "oid": str(self.oid) if self.oid is not None else None,
            **self.value.to_dict(),
        }

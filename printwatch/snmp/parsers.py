"""
printwatch - SNMP Value Parsers.

Functions for turning pysnmp/pyasn1 objects into the engine's own
Oid/SnmpValue types, plus the small text helpers the prober and
poller share.

Handles:
- Tag-based conversion of every SMIv2 scalar type
- SNMPv2 exception sentinels (noSuchObject, noSuchInstance, endOfMibView)
- Unparsable response OIDs (kept as oid=None so walks can stop on them)
- Text extraction with null-byte stripping
- Printer keyword detection from sysDescr
"""

import re
from typing import Any, Iterable, List, Optional, Tuple

from pyasn1.type import univ
from pysnmp.proto import rfc1902, rfc1905

from ..errors import OidParseError
from .oid import Oid
from .values import SnmpValue, SnmpVarBind, ValueKind


# =============================================================================
# pysnmp -> SnmpValue
# =============================================================================

def convert_value(value: Any) -> SnmpValue:
    """
    Convert a pysnmp value object into an SnmpValue.

    Subclasses are tested before their bases: the SNMPv2 sentinels
    derive from Null, and IpAddress/Opaque/Bits derive from OctetString.

    Examples:
        >>> convert_value(rfc1902.Counter32(4711))
        SnmpValue(kind=<ValueKind.COUNTER32: 'counter32'>, value=4711)
        >>> convert_value(rfc1905.NoSuchInstance())
        SnmpValue(kind=<ValueKind.NO_SUCH_INSTANCE: 'no_such_instance'>, value=None)
    """
    if isinstance(value, rfc1905.NoSuchObject):
        return SnmpValue(ValueKind.NO_SUCH_OBJECT)
    if isinstance(value, rfc1905.NoSuchInstance):
        return SnmpValue(ValueKind.NO_SUCH_INSTANCE)
    if isinstance(value, rfc1905.EndOfMibView):
        return SnmpValue(ValueKind.END_OF_MIB_VIEW)
    if isinstance(value, univ.Null):
        return SnmpValue.null()

    if isinstance(value, rfc1902.Counter64):
        return SnmpValue.counter64(int(value))
    if isinstance(value, rfc1902.Counter32):
        return SnmpValue.counter32(int(value))
    if isinstance(value, rfc1902.TimeTicks):
        return SnmpValue.timeticks(int(value))
    if isinstance(value, (rfc1902.Gauge32, rfc1902.Unsigned32)):
        return SnmpValue.unsigned32(int(value))
    if isinstance(value, univ.Integer):
        return SnmpValue.integer(int(value))

    if isinstance(value, rfc1902.IpAddress):
        return SnmpValue.ip_address(value.asOctets())
    if isinstance(value, rfc1902.Opaque):
        return SnmpValue.opaque(value.asOctets())
    if isinstance(value, rfc1902.Bits):
        return SnmpValue.other(f"Bits({value.prettyPrint()})")
    if isinstance(value, univ.OctetString):
        return SnmpValue.octet_string(value.asOctets())

    if isinstance(value, univ.ObjectIdentifier):
        try:
            return SnmpValue.object_identifier(Oid.from_parts(int(arc) for arc in value.asTuple()))
        except OidParseError:
            return SnmpValue.other(f"ObjectIdentifier({value.prettyPrint()})")

    label = type(value).__name__
    try:
        return SnmpValue.other(f"{label}({value.prettyPrint()})")
    except Exception:
        return SnmpValue.other(label)


def convert_oid(name: Any) -> Optional[Oid]:
    """
    Convert a response OID (ObjectName/ObjectIdentity) to an Oid.

    Returns None for anything that is not numeric dotted text.
    """
    try:
        return Oid.parse(str(name))
    except OidParseError:
        return None


def convert_var_binds(var_binds: Iterable[Any]) -> List[SnmpVarBind]:
    """Convert pysnmp (name, value) pairs into SnmpVarBinds."""
    results = []
    for var_bind in var_binds:
        name, value = var_bind[0], var_bind[1]
        results.append(SnmpVarBind(oid=convert_oid(name), value=convert_value(value)))
    return results


# =============================================================================
# Text helpers
# =============================================================================

def decode_string(value: Optional[SnmpValue]) -> Optional[str]:
    """
    Text form of a value for display fields (sysDescr, sysName, ...).

    Missing values and blank text return None. Null bytes are stripped.
    """
    if value is None or value.is_missing():
        return None

    text = value.as_text()
    if text is None:
        text = str(value)

    text = text.replace('\x00', '').strip()
    return text or None


def first_text(varbinds: Iterable[SnmpVarBind], oid: Oid) -> Optional[str]:
    """decode_string() of the first varbind matching oid."""
    for varbind in varbinds:
        if varbind.oid == oid:
            return decode_string(varbind.value)
    return None


def first_value(varbinds: Iterable[SnmpVarBind], oid: Oid) -> Optional[SnmpValue]:
    for varbind in varbinds:
        if varbind.oid == oid:
            return varbind.value
    return None


# =============================================================================
# Printer Detection
# =============================================================================

# sysDescr keywords that mark a device as a printer (case-insensitive)
PRINTER_KEYWORDS: Tuple[str, ...] = (
    "printer",
    "mfp",
    "ricoh",
    "xerox",
    "canon",
    "hp",
    "hewlett",
    "lexmark",
    "konica",
    "kyocera",
    "brother",
    "epson",
    "sharp",
    "samsung",
)


def matches_printer_keyword(sys_descr: Optional[str]) -> bool:
    """
    Check if sysDescr names a printer vendor or product term.

    Plain substring match, so "hp" also matches "HP ETHERNET MULTI-ENVIRONMENT".

    Examples:
        >>> matches_printer_keyword("RICOH IM C3000 1.02 / RICOH Network Printer")
        True
        >>> matches_printer_keyword("Linux router 5.10")
        False
    """
    if not sys_descr:
        return False

    lowered = sys_descr.lower()
    return any(keyword in lowered for keyword in PRINTER_KEYWORDS)


def split_oid_text(text: str) -> List[str]:
    """Split a comma/whitespace separated OID list, dropping blanks."""
    return [token for token in re.split(r"[,\s]+", text) if token]

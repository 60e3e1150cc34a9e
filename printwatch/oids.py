"""
printwatch - SNMP OID Constants.

Centralized OID definitions for printer discovery and polling.

Organization:
- SNMPv2-MIB: System group (sysDescr, sysObjectID, sysName, sysUpTime)
- Printer-MIB (RFC 3805): general printer name, marker life counts
- RICOH-MIB: per-function usage counters and toner levels
- Walk roots for counter OID crawling

Usage:
    from printwatch.oids import SYSTEM, PRINTER_MIB, RICOH

    request = SnmpRequest(address, [Oid.parse(SYSTEM.SYS_DESCR)])

Notes:
- Numeric OIDs only; no MIB resolution is performed
- Scalar OIDs already carry their instance suffix (.0 / .1)
"""

from typing import Dict, List


class OIDGroup:
    """Base class for OID groups with helper methods."""

    @classmethod
    def all_oids(cls) -> Dict[str, str]:
        """Return all OIDs in this group as name->oid dict."""
        return {
            name: value
            for name, value in vars(cls).items()
            if isinstance(value, str) and not name.startswith('_') and name.isupper()
        }


# =============================================================================
# SNMPv2-MIB - System Group
# =============================================================================

class SYSTEM(OIDGroup):
    """
    SNMPv2-MIB System Group OIDs.

    Base: 1.3.6.1.2.1.1 (iso.org.dod.internet.mgmt.mib-2.system)
    """
    BASE = "1.3.6.1.2.1.1"

    SYS_DESCR = "1.3.6.1.2.1.1.1.0"           # System description string
    SYS_OBJECT_ID = "1.3.6.1.2.1.1.2.0"       # Vendor's authoritative ID
    SYS_UPTIME = "1.3.6.1.2.1.1.3.0"          # Time since re-init (hundredths)
    SYS_NAME = "1.3.6.1.2.1.1.5.0"            # Administratively assigned name


# =============================================================================
# Printer-MIB (RFC 3805)
# =============================================================================

class PRINTER_MIB(OIDGroup):
    """
    Printer-MIB OIDs.

    Base: 1.3.6.1.2.1.43 (mib-2.printmib)
    """
    BASE = "1.3.6.1.2.1.43"

    # prtGeneralPrinterName.1
    GENERAL_PRINTER_NAME = "1.3.6.1.2.1.43.5.1.1.16.1"

    # prtMarkerLifeCount.1.{1,2,3}
    MARKER_LIFECOUNT_1 = "1.3.6.1.2.1.43.10.2.1.4.1.1"
    MARKER_LIFECOUNT_2 = "1.3.6.1.2.1.43.10.2.1.4.1.2"
    MARKER_LIFECOUNT_3 = "1.3.6.1.2.1.43.10.2.1.4.1.3"


# =============================================================================
# RICOH-MIB
# =============================================================================

class RICOH(OIDGroup):
    """
    Ricoh private enterprise OIDs.

    Base: 1.3.6.1.4.1.367 (enterprises.ricoh)
    Counter table: 1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.<counter index>
    Toner table:   1.3.6.1.4.1.367.3.2.1.2.24.1.1.5.<colorant index>
    """
    BASE = "1.3.6.1.4.1.367"
    COUNTER_ROOT = "1.3.6.1.4.1.367.3.2.1.2.19"
    TONER_ROOT = "1.3.6.1.4.1.367.3.2.1.2.24"

    COUNTER_COLOR_COPIER = "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.17"
    COUNTER_COLOR_PRINTER = "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.60"
    COUNTER_BW_COPIER = "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.18"
    COUNTER_BW_PRINTER = "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.61"

    TONER_BLACK = "1.3.6.1.4.1.367.3.2.1.2.24.1.1.5.1"
    TONER_CYAN = "1.3.6.1.4.1.367.3.2.1.2.24.1.1.5.2"
    TONER_MAGENTA = "1.3.6.1.4.1.367.3.2.1.2.24.1.1.5.3"
    TONER_YELLOW = "1.3.6.1.4.1.367.3.2.1.2.24.1.1.5.4"


# =============================================================================
# Groupings used by discovery, polling and crawling
# =============================================================================

# Fetched together in the first discovery GET
PROBE_IDENTITY = [SYSTEM.SYS_DESCR, SYSTEM.SYS_OBJECT_ID]

# Polled for every known printer (before the counter mapping)
POLL_SYSTEM = [
    SYSTEM.SYS_DESCR,
    SYSTEM.SYS_OBJECT_ID,
    SYSTEM.SYS_NAME,
    SYSTEM.SYS_UPTIME,
]

RICOH_USAGE = [
    RICOH.COUNTER_BW_COPIER,
    RICOH.COUNTER_BW_PRINTER,
    RICOH.COUNTER_COLOR_COPIER,
    RICOH.COUNTER_COLOR_PRINTER,
]

RICOH_TONER = [
    RICOH.TONER_BLACK,
    RICOH.TONER_CYAN,
    RICOH.TONER_MAGENTA,
    RICOH.TONER_YELLOW,
]

# Subtrees walked when building a counter mapping from scratch
CRAWL_ROOTS: List[str] = [
    PRINTER_MIB.BASE,
    RICOH.BASE,
    RICOH.COUNTER_ROOT,
    RICOH.TONER_ROOT,
]

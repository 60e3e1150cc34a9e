"""
printwatch - Printer Polling.

One poll is a single batched GET covering identity fields, the Ricoh
usage counters, every candidate in the counter mapping and the Ricoh
toner levels. The response is then resolved into a CounterSnapshot,
profiled, and reduced to a display name.

Also here: crawling a printer's MIB subtrees to build a counter mapping
when the defaults do not fit a device.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import SnmpConfig
from .counters import CounterResolution, default_counter_oids, counter_oids_from_walk, resolve_counters
from .errors import SnmpError, SnmpFailureError
from .models import CounterOidSet, PrinterRecord
from .oids import CRAWL_ROOTS, POLL_SYSTEM, PRINTER_MIB, RICOH, RICOH_TONER, RICOH_USAGE, SYSTEM
from .profiler import RicohProfile
from .snmp.client import SnmpClient, SnmpV2cClient
from .snmp.messages import SnmpAddress, SnmpRequest, SnmpWalkRequest
from .snmp.oid import Oid
from .snmp.parsers import first_text, first_value
from .snmp.values import NUMERIC_KINDS, SnmpVarBind, ValueKind

log = logging.getLogger("printwatch.poller")

SYS_DESCR = Oid.parse(SYSTEM.SYS_DESCR)
SYS_OBJECT_ID = Oid.parse(SYSTEM.SYS_OBJECT_ID)
SYS_NAME = Oid.parse(SYSTEM.SYS_NAME)
SYS_UPTIME = Oid.parse(SYSTEM.SYS_UPTIME)
PRINTER_NAME = Oid.parse(PRINTER_MIB.GENERAL_PRINTER_NAME)


def poll_oids(counter_oids: CounterOidSet) -> List[Oid]:
    """
    OIDs requested by a poll, in request order, without duplicates.

    System fields, printer name, Ricoh usage counters, the mapping's
    bw/color/total candidates, then toner levels.
    """
    ordered: List[Oid] = []
    seen = set()

    def push(oid: Oid) -> None:
        if oid not in seen:
            seen.add(oid)
            ordered.append(oid)

    for text in POLL_SYSTEM:
        push(Oid.parse(text))
    push(PRINTER_NAME)
    for text in RICOH_USAGE:
        push(Oid.parse(text))
    for oid in counter_oids.all_oids():
        push(oid)
    for text in RICOH_TONER:
        push(Oid.parse(text))

    return ordered


def _counter_value(varbinds: Sequence[SnmpVarBind], oid_text: str) -> Optional[int]:
    value = first_value(varbinds, Oid.parse(oid_text))
    if value is None or value.is_missing():
        return None
    return value.as_unsigned()


def _signed_value(varbinds: Sequence[SnmpVarBind], oid_text: str) -> Optional[int]:
    # Ricoh reports toner states as negative sentinels (-3 = ok, -100 = near end)
    value = first_value(varbinds, Oid.parse(oid_text))
    if value is None or value.kind not in NUMERIC_KINDS:
        return None
    return value.value


def _sum(left: Optional[int], right: Optional[int]) -> Optional[int]:
    if left is None or right is None:
        return None
    return left + right


@dataclass
class UsageBreakdown:
    """Ricoh per-function page counts."""
    bw_copier: Optional[int] = None
    bw_printer: Optional[int] = None
    color_copier: Optional[int] = None
    color_printer: Optional[int] = None

    @property
    def bw_total(self) -> Optional[int]:
        return _sum(self.bw_copier, self.bw_printer)

    @property
    def color_total(self) -> Optional[int]:
        return _sum(self.color_copier, self.color_printer)

    @classmethod
    def from_varbinds(cls, varbinds: Sequence[SnmpVarBind]) -> 'UsageBreakdown':
        return cls(
            bw_copier=_counter_value(varbinds, RICOH.COUNTER_BW_COPIER),
            bw_printer=_counter_value(varbinds, RICOH.COUNTER_BW_PRINTER),
            color_copier=_counter_value(varbinds, RICOH.COUNTER_COLOR_COPIER),
            color_printer=_counter_value(varbinds, RICOH.COUNTER_COLOR_PRINTER),
        )

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "bw_copier": self.bw_copier,
            "bw_printer": self.bw_printer,
            "color_copier": self.color_copier,
            "color_printer": self.color_printer,
        }


@dataclass
class TonerLevels:
    """Ricoh toner readings; negative values are vendor status codes."""
    black: Optional[int] = None
    cyan: Optional[int] = None
    magenta: Optional[int] = None
    yellow: Optional[int] = None

    @classmethod
    def from_varbinds(cls, varbinds: Sequence[SnmpVarBind]) -> 'TonerLevels':
        return cls(
            black=_signed_value(varbinds, RICOH.TONER_BLACK),
            cyan=_signed_value(varbinds, RICOH.TONER_CYAN),
            magenta=_signed_value(varbinds, RICOH.TONER_MAGENTA),
            yellow=_signed_value(varbinds, RICOH.TONER_YELLOW),
        )

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {
            "black": self.black,
            "cyan": self.cyan,
            "magenta": self.magenta,
            "yellow": self.yellow,
        }


@dataclass
class PollResult:
    """Everything learned from one poll of one printer."""
    printer_id: str
    received_at: int
    varbinds: List[SnmpVarBind]
    resolution: CounterResolution
    profile: RicohProfile
    usage: UsageBreakdown = field(default_factory=UsageBreakdown)
    toner: TonerLevels = field(default_factory=TonerLevels)

    printer_name: Optional[str] = None
    sys_name: Optional[str] = None
    sys_descr: Optional[str] = None
    sys_object_id: Optional[str] = None
    uptime_ticks: Optional[int] = None

    @property
    def display_name(self) -> Optional[str]:
        """Printer name, else sysName, else sysDescr."""
        return self.printer_name or self.sys_name or self.sys_descr

    @property
    def has_identity(self) -> bool:
        """True if the device reported any naming field."""
        return self.display_name is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "printer_id": self.printer_id,
            "received_at": self.received_at,
            "display_name": self.display_name,
            "printer_name": self.printer_name,
            "sys_name": self.sys_name,
            "sys_descr": self.sys_descr,
            "sys_object_id": self.sys_object_id,
            "uptime_ticks": self.uptime_ticks,
            "counters": self.resolution.to_dict(),
            "profile": self.profile.to_dict(),
            "usage": self.usage.to_dict(),
            "toner": self.toner.to_dict(),
            "varbinds": [vb.to_dict() for vb in self.varbinds],
        }


async def poll_printer(
    record: PrinterRecord,
    counter_oids: Optional[CounterOidSet] = None,
    client: Optional[SnmpClient] = None,
    now: Optional[int] = None,
    config: Optional[SnmpConfig] = None,
) -> PollResult:
    """
    Poll one printer.

    Args:
        record: Printer to poll (its community overrides the default)
        counter_oids: Counter mapping (default_counter_oids() if omitted)
        client: SnmpClient to use (SnmpV2cClient(config) if omitted)
        now: Receive timestamp, epoch seconds (defaults to time.time())
        config: SNMP defaults when no client is supplied

    Returns:
        PollResult

    Raises:
        SnmpFailureError: record has no SNMP address, or the GET failed
        SnmpAuthError, SnmpTimeoutError: from the GET
    """
    if record.snmp_address is None:
        raise SnmpFailureError(record.printer_id, "Printer has no SNMP address configured.")

    counter_oids = counter_oids if counter_oids is not None else default_counter_oids()
    client = client or SnmpV2cClient(config)

    request = SnmpRequest(record.snmp_address, poll_oids(counter_oids), record.community)
    log.debug(f"Polling {record.printer_id} at {record.snmp_address} ({len(request.oids)} OIDs)")

    try:
        response = await client.get(request)
    except SnmpError as e:
        log.warning(f"Poll failed for {record.printer_id}: {e.user_summary()}")
        raise

    received_at = int(time.time()) if now is None else now
    varbinds = response.varbinds

    sys_descr = first_text(varbinds, SYS_DESCR)
    object_id_value = first_value(varbinds, SYS_OBJECT_ID)
    sys_object_id = None
    if object_id_value is not None and object_id_value.kind == ValueKind.OBJECT_IDENTIFIER:
        sys_object_id = str(object_id_value.value)

    uptime_value = first_value(varbinds, SYS_UPTIME)
    uptime_ticks = None
    if uptime_value is not None and uptime_value.kind == ValueKind.TIMETICKS:
        uptime_ticks = uptime_value.value

    profile = RicohProfile.identify(
        sys_object_id or record.sys_object_id,
        sys_descr or record.model,
    )

    resolution = resolve_counters(received_at, counter_oids, varbinds)
    for warning in resolution.warnings:
        log.debug(f"{record.printer_id}: {warning}")

    return PollResult(
        printer_id=record.printer_id,
        received_at=received_at,
        varbinds=list(varbinds),
        resolution=resolution,
        profile=profile,
        usage=UsageBreakdown.from_varbinds(varbinds),
        toner=TonerLevels.from_varbinds(varbinds),
        printer_name=first_text(varbinds, PRINTER_NAME),
        sys_name=first_text(varbinds, SYS_NAME),
        sys_descr=sys_descr,
        sys_object_id=sys_object_id,
        uptime_ticks=uptime_ticks,
    )


async def crawl_counter_oids(
    address: SnmpAddress,
    community: Optional[str] = None,
    client: Optional[SnmpClient] = None,
    config: Optional[SnmpConfig] = None,
) -> CounterOidSet:
    """
    Walk the Printer-MIB and Ricoh subtrees and derive a counter mapping.

    Each root is walked without a result limit. A failing root is
    skipped; the crawl only fails if nothing came back at all.

    Raises:
        SnmpError: the last walk error when no varbinds were collected
        SnmpFailureError: no varbinds and no error
    """
    client = client or SnmpV2cClient(config)
    varbinds: List[SnmpVarBind] = []
    last_error: Optional[SnmpError] = None

    for root in CRAWL_ROOTS:
        request = SnmpWalkRequest(address, Oid.parse(root), community, max_results=0)
        try:
            response = await client.walk(request)
        except SnmpError as e:
            log.warning(f"Crawl of {root} on {address} failed: {e.user_summary()}")
            last_error = e
            continue
        log.debug(f"Crawl of {root} on {address}: {len(response.varbinds)} varbinds")
        varbinds.extend(response.varbinds)

    if not varbinds:
        if last_error is not None:
            raise last_error
        raise SnmpFailureError(str(address), "No OIDs returned from crawl.")

    mapping = counter_oids_from_walk(varbinds)
    if mapping.is_empty():
        log.warning(f"Crawl of {address} returned no numeric counters")
        return mapping

    log.info(
        f"Crawl of {address} found {len(mapping.bw)} bw, {len(mapping.color)} color, "
        f"{len(mapping.total)} total candidates"
    )
    return mapping

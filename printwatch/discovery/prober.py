"""
printwatch - Discovery Prober.

Decides whether one host is a printer and builds its PrinterRecord.

Probe sequence:
    1. GET sysDescr + sysObjectID (one request; errors propagate)
    2. GET prtGeneralPrinterName (errors logged, treated as absent)
    3. only if 2 gave nothing: GET prtMarkerLifeCount.1 (presence test)
    4. printer if 2 answered, 3 was numeric, or sysDescr has a
       printer keyword
"""

import logging
import time
from typing import Optional

from ..config import SnmpConfig
from ..errors import SnmpError
from ..models import PrinterRecord, PrinterStatus
from ..oids import PRINTER_MIB, SYSTEM
from ..snmp.client import SnmpClient, SnmpV2cClient
from ..snmp.messages import SnmpAddress, SnmpRequest
from ..snmp.oid import Oid
from ..snmp.parsers import first_text, first_value, matches_printer_keyword
from ..snmp.values import ValueKind

log = logging.getLogger("printwatch.discovery")

SYS_DESCR = Oid.parse(SYSTEM.SYS_DESCR)
SYS_OBJECT_ID = Oid.parse(SYSTEM.SYS_OBJECT_ID)
PRINTER_NAME = Oid.parse(PRINTER_MIB.GENERAL_PRINTER_NAME)
MARKER_LIFECOUNT_1 = Oid.parse(PRINTER_MIB.MARKER_LIFECOUNT_1)


def normalize_community(community: Optional[str]) -> Optional[str]:
    """Blank community strings count as not given."""
    if community is None or not community.strip():
        return None
    return community


async def probe_printer(
    address: SnmpAddress,
    community: Optional[str] = None,
    config: Optional[SnmpConfig] = None,
    client: Optional[SnmpClient] = None,
) -> Optional[PrinterRecord]:
    """
    Probe one host.

    Args:
        address: Target host and port
        community: Community override (blank = use config default)
        config: SNMP defaults, used when no client is supplied
        client: SnmpClient to use (SnmpV2cClient(config) if omitted)

    Returns:
        PrinterRecord, or None if the host is not a printer

    Raises:
        SnmpAuthError, SnmpTimeoutError, SnmpFailureError: from step 1
    """
    community = normalize_community(community)
    client = client or SnmpV2cClient(config)

    log.debug(f"Discovery probe {address}")

    response = await client.get(
        SnmpRequest(address, [SYS_DESCR, SYS_OBJECT_ID], community)
    )
    sys_descr = first_text(response.varbinds, SYS_DESCR)
    object_id_value = first_value(response.varbinds, SYS_OBJECT_ID)
    sys_object_id = None
    if object_id_value is not None and object_id_value.kind == ValueKind.OBJECT_IDENTIFIER:
        sys_object_id = str(object_id_value.value)

    printer_name = await _probe_printer_name(client, address, community)
    marker_present = False
    if printer_name is None:
        marker_present = await _probe_marker_life_count(client, address, community)

    keyword_match = matches_printer_keyword(sys_descr)

    if not (printer_name is not None or marker_present or keyword_match):
        log.debug(f"{address} is not a printer")
        return None

    if printer_name is None and not marker_present:
        log.info(f"Printer discovered at {address} (sysDescr keyword match)")
    else:
        log.info(f"Printer discovered at {address}")

    return PrinterRecord(
        printer_id=f"snmp-{address.host}",
        host=address.host,
        model=printer_name or sys_descr,
        sys_object_id=sys_object_id,
        snmp_address=address,
        community=community,
        status=PrinterStatus.ONLINE,
        last_seen=int(time.time()),
    )


async def _probe_printer_name(
    client: SnmpClient,
    address: SnmpAddress,
    community: Optional[str],
) -> Optional[str]:
    try:
        response = await client.get(SnmpRequest(address, [PRINTER_NAME], community))
    except SnmpError as e:
        log.debug(f"Printer name probe failed for {address}: {e}")
        return None
    return first_text(response.varbinds, PRINTER_NAME)


async def _probe_marker_life_count(
    client: SnmpClient,
    address: SnmpAddress,
    community: Optional[str],
) -> bool:
    """True if prtMarkerLifeCount.1 answered with a number."""
    try:
        response = await client.get(SnmpRequest(address, [MARKER_LIFECOUNT_1], community))
    except SnmpError as e:
        log.debug(f"Marker life count probe failed for {address}: {e}")
        return False

    value = first_value(response.varbinds, MARKER_LIFECOUNT_1)
    return value is not None and value.as_unsigned() is not None

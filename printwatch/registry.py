"""
printwatch - Printer Registry.

In-memory list of known printers. Discovery results are merged by SNMP
host; manual entries get "manual-<host>" ids; polling may backfill the
display name. Records are never deleted here; that is the caller's job.
"""

import logging
import time
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from .models import PrinterRecord, PrinterStatus
from .snmp.messages import DEFAULT_SNMP_PORT, SnmpAddress

if TYPE_CHECKING:
    from .poller import PollResult

log = logging.getLogger("printwatch.registry")


def _host_of(record: PrinterRecord) -> Optional[str]:
    return record.snmp_address.host if record.snmp_address else None


class PrinterRegistry:
    """
    Ordered collection of PrinterRecords.

    Usage:
        registry = PrinterRegistry()
        registry.upsert(record)               # from discovery
        registry.add_manual("10.0.0.7", name="Front desk")
        registry.apply_name_fallback(record.printer_id, "MP C3004", allow_override=True)
    """

    def __init__(self, records: Optional[List[PrinterRecord]] = None):
        self._records: List[PrinterRecord] = list(records or [])

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PrinterRecord]:
        return iter(list(self._records))

    @property
    def records(self) -> List[PrinterRecord]:
        return list(self._records)

    def get(self, printer_id: str) -> Optional[PrinterRecord]:
        return next((r for r in self._records if r.printer_id == printer_id), None)

    def find_by_host(self, host: str) -> Optional[PrinterRecord]:
        """Match on SNMP address host, falling back to the display host."""
        for record in self._records:
            if _host_of(record) == host or record.host == host:
                return record
        return None

    def upsert(self, record: PrinterRecord) -> PrinterRecord:
        """
        Insert a record, or merge it into the one with the same SNMP host.

        On merge every field except the id is overwritten.

        Returns:
            The stored record
        """
        host = _host_of(record)
        existing = None
        if host is not None:
            existing = next((r for r in self._records if _host_of(r) == host), None)

        if existing is None:
            self._records.append(record)
            log.debug(f"Registry added {record.printer_id}")
            return record

        existing.host = record.host
        existing.model = record.model
        existing.sys_object_id = record.sys_object_id
        existing.snmp_address = record.snmp_address
        existing.community = record.community
        existing.status = record.status
        existing.last_seen = record.last_seen
        log.debug(f"Registry merged {record.printer_id} into {existing.printer_id}")
        return existing

    def add_manual(
        self,
        host: str,
        name: Optional[str] = None,
        port: Optional[int] = None,
        community: Optional[str] = None,
    ) -> PrinterRecord:
        """
        Add a printer by hand, or update the existing record for host.

        Blank name/community leave existing values alone.

        Raises:
            ValueError: host is blank or port is out of range
        """
        host = host.strip()
        if not host:
            raise ValueError("host is empty")
        port = DEFAULT_SNMP_PORT if port is None else port
        if not 0 < port <= 65535:
            raise ValueError(f"invalid port: {port}")

        name = (name or "").strip() or None
        community = (community or "").strip() or None
        now = int(time.time())

        existing = self.find_by_host(host)
        if existing is not None:
            if name:
                existing.model = name
            existing.host = host
            existing.snmp_address = SnmpAddress(host, port)
            if community:
                existing.community = community
            existing.last_seen = now
            log.info(f"Updated printer {host}")
            return existing

        record = PrinterRecord(
            printer_id=f"manual-{host}",
            host=host,
            model=name,
            snmp_address=SnmpAddress(host, port),
            community=community,
            last_seen=now,
        )
        self._records.append(record)
        log.info(f"Added printer {host}")
        return record

    def apply_name_fallback(
        self,
        printer_id: str,
        name: Optional[str],
        allow_override: bool,
        sys_descr: Optional[str] = None,
    ) -> bool:
        """
        Backfill a printer's display name from a poll.

        Rules:
            - empty current name: always filled
            - manual records: never overridden
            - otherwise, only with allow_override and only when the current
              name equals sysDescr or the host (auto-derived names)

        Returns:
            True if the name changed
        """
        name = (name or "").strip()
        if not name:
            return False

        record = self.get(printer_id)
        if record is None:
            return False

        existing = (record.model or "").strip()
        if not existing:
            record.model = name
            return True

        if record.is_manual or not allow_override:
            return False

        sys_descr = (sys_descr or "").strip()
        host = (record.host or "").strip()
        auto_derived = (sys_descr and existing == sys_descr) or (host and existing == host)

        if auto_derived and existing != name:
            record.model = name
            return True
        return False

    def apply_poll(self, printer_id: str, result: 'PollResult') -> bool:
        """
        Record a successful poll: backfill the name, mark online.

        Returns:
            True if the display name changed
        """
        changed = self.apply_name_fallback(
            printer_id,
            result.display_name,
            allow_override=result.has_identity,
            sys_descr=result.sys_descr,
        )
        if changed:
            log.info(f"Printer {printer_id} renamed to {result.display_name!r} from poll")
        self.mark_status(printer_id, PrinterStatus.ONLINE, seen_at=result.received_at)
        return changed

    def mark_status(
        self,
        printer_id: str,
        status: PrinterStatus,
        seen_at: Optional[int] = None,
    ) -> None:
        record = self.get(printer_id)
        if record is None:
            return
        record.status = status
        if seen_at is not None:
            record.last_seen = seen_at

    def to_list(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self._records]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> 'PrinterRegistry':
        return cls([PrinterRecord.from_dict(item) for item in data])

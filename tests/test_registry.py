"""Tests for PrinterRegistry merge, manual entry and name backfill."""

import json

import pytest

from printwatch.models import PrinterRecord, PrinterStatus
from printwatch.registry import PrinterRegistry
from printwatch.snmp.messages import SnmpAddress


def discovered(host, model="RICOH IM C3000", **kwargs):
    return PrinterRecord(
        printer_id=f"snmp-{host}",
        host=host,
        model=model,
        snmp_address=SnmpAddress(host),
        status=PrinterStatus.ONLINE,
        last_seen=100,
        **kwargs,
    )


class TestUpsert:

    def test_insert(self):
        registry = PrinterRegistry()
        registry.upsert(discovered("10.0.0.5"))
        assert len(registry) == 1

    def test_merge_by_snmp_host_keeps_id(self):
        """Should overwrite fields but keep the existing identity."""
        registry = PrinterRegistry()
        manual = registry.add_manual("10.0.0.5", name="Front desk")

        stored = registry.upsert(discovered("10.0.0.5", model="RICOH MP C3004", community="office"))

        assert len(registry) == 1
        assert stored is manual
        assert stored.printer_id == "manual-10.0.0.5"
        assert stored.model == "RICOH MP C3004"
        assert stored.community == "office"
        assert stored.status == PrinterStatus.ONLINE

    def test_records_without_address_never_merge(self):
        registry = PrinterRegistry()
        registry.upsert(PrinterRecord(printer_id="a"))
        registry.upsert(PrinterRecord(printer_id="b"))
        assert len(registry) == 2


class TestAddManual:

    def test_new_record(self):
        registry = PrinterRegistry()
        record = registry.add_manual(" 10.0.0.9 ", name="Warehouse", port=1161, community="ops")

        assert record.printer_id == "manual-10.0.0.9"
        assert record.is_manual
        assert record.snmp_address == SnmpAddress("10.0.0.9", 1161)
        assert record.model == "Warehouse"
        assert record.community == "ops"

    def test_updates_existing_host(self):
        """Should update in place; blank name keeps the old one."""
        registry = PrinterRegistry()
        registry.upsert(discovered("10.0.0.5"))

        record = registry.add_manual("10.0.0.5", name="", port=162)

        assert len(registry) == 1
        assert record.printer_id == "snmp-10.0.0.5"
        assert record.model == "RICOH IM C3000"
        assert record.snmp_address.port == 162

    @pytest.mark.parametrize("host, port", [("", None), ("   ", None), ("10.0.0.5", 0), ("10.0.0.5", 70000)])
    def test_invalid_input(self, host, port):
        with pytest.raises(ValueError):
            PrinterRegistry().add_manual(host, port=port)


class TestNameFallback:

    def test_fills_empty_name(self):
        registry = PrinterRegistry([discovered("10.0.0.5", model=None)])
        assert registry.apply_name_fallback("snmp-10.0.0.5", "Lobby MFP", allow_override=False)
        assert registry.get("snmp-10.0.0.5").model == "Lobby MFP"

    def test_never_overrides_manual(self):
        registry = PrinterRegistry()
        registry.add_manual("10.0.0.5", name="10.0.0.5")
        assert not registry.apply_name_fallback("manual-10.0.0.5", "Lobby MFP", allow_override=True)

    def test_overrides_auto_derived_sys_descr(self):
        """Should replace a name that was copied from sysDescr."""
        registry = PrinterRegistry([discovered("10.0.0.5", model="RICOH IM C3000 1.02")])
        changed = registry.apply_name_fallback(
            "snmp-10.0.0.5", "Lobby MFP", allow_override=True, sys_descr="RICOH IM C3000 1.02",
        )
        assert changed
        assert registry.get("snmp-10.0.0.5").model == "Lobby MFP"

    def test_overrides_host_name(self):
        registry = PrinterRegistry([discovered("10.0.0.5", model="10.0.0.5")])
        assert registry.apply_name_fallback("snmp-10.0.0.5", "Lobby MFP", allow_override=True)

    def test_keeps_user_chosen_name(self):
        registry = PrinterRegistry([discovered("10.0.0.5", model="Accounting")])
        assert not registry.apply_name_fallback(
            "snmp-10.0.0.5", "Lobby MFP", allow_override=True, sys_descr="RICOH IM C3000",
        )

    def test_no_override_without_permission(self):
        registry = PrinterRegistry([discovered("10.0.0.5", model="10.0.0.5")])
        assert not registry.apply_name_fallback("snmp-10.0.0.5", "Lobby MFP", allow_override=False)

    def test_blank_candidate_ignored(self):
        registry = PrinterRegistry([discovered("10.0.0.5", model=None)])
        assert not registry.apply_name_fallback("snmp-10.0.0.5", "  ", allow_override=True)

    def test_unknown_printer(self):
        assert not PrinterRegistry().apply_name_fallback("nope", "x", allow_override=True)


class TestSerialization:

    def test_list_round_trip_defaults(self):
        """Should default missing status to unknown and port to 161."""
        registry = PrinterRegistry.from_list([
            {"printer_id": "manual-10.0.0.7", "host": "10.0.0.7", "snmp_address": {"host": "10.0.0.7"}},
        ])
        record = registry.get("manual-10.0.0.7")
        assert record.status == PrinterStatus.UNKNOWN
        assert record.snmp_address.port == 161
        assert registry.to_list()[0]["snmp_address"] == {"host": "10.0.0.7", "port": 161}

    def test_find_by_display_host(self):
        registry = PrinterRegistry([PrinterRecord(printer_id="x", host="printer.local")])
        assert registry.find_by_host("printer.local").printer_id == "x"

    def test_record_json(self):
        record = discovered("10.0.0.5", community="office")
        data = json.loads(record.to_json())
        assert data["status"] == "online"
        assert data["snmp_address"] == {"host": "10.0.0.5", "port": 161}
        assert PrinterRecord.from_dict(data) == record

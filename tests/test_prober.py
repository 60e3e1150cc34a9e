"""Tests for the discovery prober."""

import pytest

from printwatch.discovery.prober import (
    MARKER_LIFECOUNT_1,
    PRINTER_NAME,
    SYS_DESCR,
    SYS_OBJECT_ID,
    normalize_community,
    probe_printer,
)
from printwatch.errors import SnmpAuthError, SnmpTimeoutError
from printwatch.models import PrinterStatus
from printwatch.snmp.values import SnmpValue

from conftest import counter, sentinel, text, vb


def identity(descr="Linux host", object_id="1.3.6.1.4.1.8072.3.2.10"):
    return [
        text(str(SYS_DESCR), descr),
        vb(SYS_OBJECT_ID, SnmpValue.object_identifier(object_id)),
    ]


class TestProbePrinter:

    @pytest.mark.asyncio
    async def test_printer_name_answer(self, mock_client, address):
        """Should build a record named from prtGeneralPrinterName."""
        mock_client.push_varbinds(identity("RICOH IM C3000 1.02", "1.3.6.1.4.1.367.1.1"))
        mock_client.push_varbinds([text(str(PRINTER_NAME), "Front Office MFP")])

        record = await probe_printer(address, client=mock_client)

        assert record is not None
        assert record.printer_id == "snmp-10.0.0.5"
        assert record.host == "10.0.0.5"
        assert record.model == "Front Office MFP"
        assert record.sys_object_id == "1.3.6.1.4.1.367.1.1"
        assert record.snmp_address == address
        assert record.status == PrinterStatus.ONLINE
        assert record.last_seen is not None
        # marker probe skipped once the name answered
        assert len(mock_client.calls) == 2

    @pytest.mark.asyncio
    async def test_marker_life_count_answer(self, mock_client, address):
        """Should accept a numeric marker life count when the name is absent."""
        mock_client.push_varbinds(identity("Embedded print server"))
        mock_client.push_varbinds([sentinel(str(PRINTER_NAME))])
        mock_client.push_varbinds([counter(str(MARKER_LIFECOUNT_1), 48211)])

        record = await probe_printer(address, client=mock_client)

        assert record is not None
        assert record.model == "Embedded print server"
        assert [call[3] for call in mock_client.calls][2] == [MARKER_LIFECOUNT_1]

    @pytest.mark.asyncio
    async def test_keyword_fallback(self, mock_client, address):
        """Should fall back to sysDescr keywords when both MIB probes fail."""
        mock_client.push_varbinds(identity("KYOCERA Document Solutions Printing System"))
        mock_client.push_error(SnmpTimeoutError(str(address), 500))
        mock_client.push_varbinds([sentinel(str(MARKER_LIFECOUNT_1))])

        record = await probe_printer(address, client=mock_client)

        assert record is not None
        assert record.model == "KYOCERA Document Solutions Printing System"

    @pytest.mark.asyncio
    async def test_not_a_printer(self, mock_client, address):
        mock_client.push_varbinds(identity("Linux router 5.10"))
        mock_client.push_varbinds([sentinel(str(PRINTER_NAME))])
        mock_client.push_varbinds([text(str(MARKER_LIFECOUNT_1), "n/a")])

        assert await probe_printer(address, client=mock_client) is None

    @pytest.mark.asyncio
    async def test_identity_errors_propagate(self, mock_client, address):
        """Should raise errors from the first GET unchanged."""
        mock_client.push_error(SnmpAuthError(str(address)))

        with pytest.raises(SnmpAuthError):
            await probe_printer(address, client=mock_client)

    @pytest.mark.asyncio
    async def test_community_passed_and_kept(self, mock_client, address):
        mock_client.push_varbinds(identity("HP LaserJet"))
        mock_client.push_varbinds([text(str(PRINTER_NAME), "HP LaserJet M404")])

        record = await probe_printer(address, community="office", client=mock_client)

        assert record.community == "office"
        assert {call[2] for call in mock_client.calls} == {"office"}

    @pytest.mark.asyncio
    async def test_blank_community_is_absent(self, mock_client, address):
        mock_client.push_varbinds(identity("HP LaserJet"))
        mock_client.push_varbinds([text(str(PRINTER_NAME), "HP LaserJet M404")])

        record = await probe_printer(address, community="  ", client=mock_client)

        assert record.community is None
        assert mock_client.calls[0][2] == "public"

    @pytest.mark.asyncio
    async def test_non_oid_sys_object_id_dropped(self, mock_client, address):
        mock_client.push_varbinds([text(str(SYS_DESCR), "RICOH MP 305+"), text(str(SYS_OBJECT_ID), "garbage")])
        mock_client.push_varbinds([text(str(PRINTER_NAME), "MP 305+")])

        record = await probe_printer(address, client=mock_client)

        assert record.sys_object_id is None


class TestNormalizeCommunity:

    @pytest.mark.parametrize("value, expected", [
        (None, None),
        ("", None),
        ("   ", None),
        ("public", "public"),
    ])
    def test_values(self, value, expected):
        assert normalize_community(value) == expected

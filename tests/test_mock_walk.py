"""Tests for MockSnmpClient and walk termination."""

import threading

import pytest

from printwatch.errors import SnmpFailureError, SnmpTimeoutError
from printwatch.snmp.messages import SnmpRequest, SnmpResponse, SnmpWalkRequest
from printwatch.snmp.oid import Oid
from printwatch.snmp.values import SnmpValue, SnmpVarBind, ValueKind

from conftest import counter, sentinel, text

ROOT = Oid.parse("1.3.6.1.2.1.43")


def walk_request(address, max_results=0):
    return SnmpWalkRequest(address, ROOT, max_results=max_results)


class TestMockClient:

    @pytest.mark.asyncio
    async def test_returns_queued_response(self, mock_client, address):
        """Should hand out queued responses FIFO."""
        mock_client.push_varbinds([text("1.3.6.1.2.1.1.1.0", "first")])
        mock_client.push_response(SnmpResponse(address, [text("1.3.6.1.2.1.1.1.0", "second")]))

        first = await mock_client.get(SnmpRequest(address, [Oid.parse("1.3.6.1.2.1.1.1.0")]))
        second = await mock_client.get(SnmpRequest(address, [Oid.parse("1.3.6.1.2.1.1.1.0")]))

        assert first.varbinds[0].value.as_text() == "first"
        assert second.varbinds[0].value.as_text() == "second"
        assert mock_client.pending() == 0

    @pytest.mark.asyncio
    async def test_empty_queue_fails(self, mock_client, address):
        """Should raise SnmpFailureError when nothing is queued."""
        with pytest.raises(SnmpFailureError) as exc_info:
            await mock_client.get(SnmpRequest(address, [Oid.parse("1.3.6.1")]))
        assert "queue is empty" in exc_info.value.details

    @pytest.mark.asyncio
    async def test_queued_error_raised(self, mock_client, address):
        mock_client.push_error(SnmpTimeoutError(str(address), 500))
        with pytest.raises(SnmpTimeoutError):
            await mock_client.get(SnmpRequest(address, [Oid.parse("1.3.6.1")]))

    @pytest.mark.asyncio
    async def test_records_calls_with_effective_community(self, mock_client, address):
        mock_client.push_varbinds([])
        await mock_client.get(SnmpRequest(address, [Oid.parse("1.3.6.1")], community=""))

        kind, call_address, community, call_oids = mock_client.calls[0]
        assert (kind, call_address, community) == ("get", address, "public")
        assert call_oids == [Oid.parse("1.3.6.1")]

    def test_concurrent_pushes(self, mock_client):
        """Should not lose items pushed from several threads."""
        def push_many():
            for _ in range(200):
                mock_client.push_varbinds([])

        threads = [threading.Thread(target=push_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert mock_client.pending() == 800


class TestWalkTermination:

    @pytest.mark.asyncio
    async def test_repeated_oid_stops_walk(self, mock_client, address):
        """Should stop at the first repeated OID instead of looping."""
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 100)])
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 100)])
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 100)])

        response = await mock_client.walk(walk_request(address))

        assert len(response.varbinds) == 1
        assert len(mock_client.calls) == 2
        assert mock_client.pending() == 1

    @pytest.mark.asyncio
    async def test_leaving_root_stops_walk(self, mock_client, address):
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 100)])
        mock_client.push_varbinds([counter("1.3.6.1.2.1.44.1", 7)])

        response = await mock_client.walk(walk_request(address))

        assert [str(vb.oid) for vb in response.varbinds] == ["1.3.6.1.2.1.43.10.2.1.4.1.1"]

    @pytest.mark.asyncio
    async def test_empty_reply_stops_walk(self, mock_client, address):
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 100)])
        mock_client.push_varbinds([])

        response = await mock_client.walk(walk_request(address))

        assert len(response.varbinds) == 1
        assert mock_client.pending() == 0

    @pytest.mark.asyncio
    async def test_unparsable_oid_stops_walk(self, mock_client, address):
        mock_client.push_varbinds([SnmpVarBind(None, SnmpValue.counter32(1))])

        response = await mock_client.walk(walk_request(address))

        assert response.varbinds == []

    @pytest.mark.asyncio
    async def test_end_of_mib_view_stops_walk(self, mock_client, address):
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 100)])
        mock_client.push_varbinds([sentinel("1.3.6.1.2.1.43.10.2.1.4.1.2", ValueKind.END_OF_MIB_VIEW)])

        response = await mock_client.walk(walk_request(address))

        assert len(response.varbinds) == 1

    @pytest.mark.asyncio
    async def test_max_results_bounds_steps(self, mock_client, address):
        """Should issue at most max_results GET-NEXT requests."""
        for i in range(1, 6):
            mock_client.push_varbinds([counter(f"1.3.6.1.2.1.43.10.2.1.4.1.{i}", i)])

        response = await mock_client.walk(walk_request(address, max_results=3))

        assert len(response.varbinds) == 3
        assert mock_client.pending() == 2

    @pytest.mark.asyncio
    async def test_cursor_advances(self, mock_client, address):
        """Should ask for the next OID after the last accepted one."""
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 1)])
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.2", 2)])
        mock_client.push_varbinds([])

        await mock_client.walk(walk_request(address))

        assert [call[3][0] for call in mock_client.calls] == [
            ROOT,
            Oid.parse("1.3.6.1.2.1.43.10.2.1.4.1.1"),
            Oid.parse("1.3.6.1.2.1.43.10.2.1.4.1.2"),
        ]

    @pytest.mark.asyncio
    async def test_errors_propagate(self, mock_client, address):
        mock_client.push_varbinds([counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 1)])
        mock_client.push_error(SnmpTimeoutError(str(address), 500))

        with pytest.raises(SnmpTimeoutError):
            await mock_client.walk(walk_request(address))

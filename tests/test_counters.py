"""Tests for counter resolution and counter OID mappings."""

import pytest

from printwatch.counters import (
    CounterKind,
    CounterMode,
    CounterWarning,
    WarningCode,
    counter_oids_from_walk,
    default_counter_oids,
    format_oid_list,
    parse_oid_list,
    resolve_counters,
    snapshot_delta,
)
from printwatch.errors import CounterResetError, MissingCountersError, OidParseError
from printwatch.models import CounterOidSet, CounterSnapshot
from printwatch.oids import PRINTER_MIB, RICOH
from printwatch.snmp.values import SnmpValue, ValueKind

from conftest import counter, oids, sentinel, text, vb

BW = "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.18"
COLOR = "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.17"
TOTAL = "1.3.6.1.2.1.43.10.2.1.4.1.3"


@pytest.fixture
def mapping():
    return CounterOidSet(bw=oids(BW), color=oids(COLOR), total=oids(TOTAL))


def warning_texts(resolution):
    return [str(w) for w in resolution.warnings]


class TestResolveCounters:

    def test_bw_and_color_derive_total(self, mapping):
        """Should derive total = bw + color when total is not returned."""
        result = resolve_counters(1700000000, mapping, [counter(BW, 100), counter(COLOR, 50)])

        assert result.mode == CounterMode.BW_COLOR
        assert result.snapshot.bw == 100
        assert result.snapshot.color == 50
        assert result.snapshot.total == 150
        assert result.has_warning(WarningCode.DERIVED_TOTAL)
        assert "Total counter derived from BW + Color" in warning_texts(result)
        assert result.snapshot.source_oids.bw == BW
        assert result.snapshot.source_oids.color == COLOR
        assert result.snapshot.source_oids.total is None

    def test_bw_color_and_total(self, mapping):
        """Should use the fetched total and record its OID."""
        result = resolve_counters(1, mapping, [counter(BW, 100), counter(COLOR, 50), counter(TOTAL, 160)])

        assert result.mode == CounterMode.BW_COLOR
        assert result.snapshot.total == 160
        assert result.warnings == []
        assert result.snapshot.source_oids.total == TOTAL

    def test_total_fallback(self, mapping):
        """Should fall back to total and warn about both split counters."""
        result = resolve_counters(1, mapping, [counter(TOTAL, 999)])

        assert result.mode == CounterMode.TOTAL_ONLY
        assert result.snapshot.total == 999
        assert result.snapshot.bw is None
        assert result.snapshot.color is None
        assert warning_texts(result) == [
            "Missing bw counter",
            "Missing color counter",
            "Used total counter fallback",
        ]
        assert result.snapshot.source_oids.total == TOTAL

    def test_total_only_drops_lone_split_counter(self, mapping):
        """Should carry only total when just one of bw/color resolved."""
        result = resolve_counters(1, mapping, [counter(BW, 10), counter(TOTAL, 999)])

        assert result.mode == CounterMode.TOTAL_ONLY
        assert result.snapshot.bw is None
        assert result.snapshot.source_oids.bw is None
        assert result.missing_categories() == [CounterKind.COLOR]

    def test_nothing_present(self, mapping):
        """Should report MISSING with one warning per category."""
        result = resolve_counters(1, mapping, [])

        assert result.mode == CounterMode.MISSING
        assert result.missing_categories() == [CounterKind.BW, CounterKind.COLOR, CounterKind.TOTAL]
        assert len(result.warnings) == 3

    def test_partial(self, mapping):
        result = resolve_counters(1, mapping, [counter(COLOR, 5)])

        assert result.mode == CounterMode.PARTIAL
        assert result.snapshot.color == 5
        assert result.missing_categories() == [CounterKind.BW, CounterKind.TOTAL]

    def test_candidates_in_priority_order(self):
        """Should take the first candidate with a numeric value."""
        mapping = CounterOidSet(bw=oids(BW, "1.3.6.1.2.1.43.10.2.1.4.1.1"), color=oids(COLOR))
        varbinds = [
            sentinel(BW, ValueKind.NO_SUCH_INSTANCE),
            counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 77),
            counter(COLOR, 3),
        ]

        result = resolve_counters(1, mapping, varbinds)

        assert result.snapshot.bw == 77
        assert result.snapshot.source_oids.bw == "1.3.6.1.2.1.43.10.2.1.4.1.1"
        assert not result.has_warning(WarningCode.NON_NUMERIC)

    def test_non_numeric_warned_and_skipped(self):
        mapping = CounterOidSet(bw=oids(BW, "1.3.6.1.2.1.43.10.2.1.4.1.1"))
        varbinds = [text(BW, "n/a"), counter("1.3.6.1.2.1.43.10.2.1.4.1.1", 12)]

        result = resolve_counters(1, mapping, varbinds)

        assert result.snapshot.bw == 12
        assert f"Non-numeric bw counter at OID {BW}" in warning_texts(result)

    def test_timeticks_warned_and_skipped(self):
        """Should treat a TimeTicks candidate as non-numeric and try the next one."""
        mapping = CounterOidSet(total=oids(TOTAL, PRINTER_MIB.MARKER_LIFECOUNT_1))
        varbinds = [
            vb(TOTAL, SnmpValue.timeticks(999)),
            counter(PRINTER_MIB.MARKER_LIFECOUNT_1, 40),
        ]

        result = resolve_counters(1, mapping, varbinds)

        assert result.snapshot.total == 40
        assert result.has_warning(WarningCode.NON_NUMERIC, CounterKind.TOTAL)

    def test_timeticks_only_total_is_missing(self, mapping):
        result = resolve_counters(1, mapping, [vb(TOTAL, SnmpValue.timeticks(999))])

        assert result.mode == CounterMode.MISSING
        assert result.has_warning(WarningCode.NON_NUMERIC, CounterKind.TOTAL)

    def test_negative_integer_is_non_numeric(self, mapping):
        result = resolve_counters(1, mapping, [vb(TOTAL, SnmpValue.integer(-2))])

        assert result.mode == CounterMode.MISSING
        assert result.has_warning(WarningCode.NON_NUMERIC, CounterKind.TOTAL)

    def test_raw_varbinds_kept(self, mapping):
        varbinds = [counter(TOTAL, 1)]
        assert resolve_counters(1, mapping, varbinds).raw_varbinds == varbinds

    def test_ensure_complete(self, mapping):
        """Should raise MissingCountersError only without a usable total."""
        ok = resolve_counters(1, mapping, [counter(TOTAL, 5)])
        assert ok.ensure_complete("p1") is ok

        partial = resolve_counters(1, mapping, [counter(BW, 5)])
        with pytest.raises(MissingCountersError) as exc_info:
            partial.ensure_complete("p1")
        assert "color, total" in exc_info.value.technical_detail()

    def test_to_dict(self, mapping):
        data = resolve_counters(5, mapping, [counter(TOTAL, 9)]).to_dict()
        assert data["mode"] == "total_only"
        assert data["snapshot"]["total"] == 9
        assert data["snapshot"]["timestamp"] == 5


class TestSnapshotDelta:

    def test_usage_between_snapshots(self):
        start = CounterSnapshot(timestamp=100, bw=1000, color=200, total=1200)
        end = CounterSnapshot(timestamp=200, bw=1100, color=250, total=None)

        delta = snapshot_delta("p1", start, end)

        assert (delta.timestamp, delta.bw, delta.color, delta.total) == (200, 100, 50, None)

    def test_counter_went_backwards(self):
        start = CounterSnapshot(timestamp=100, total=5000)
        end = CounterSnapshot(timestamp=200, total=12)

        with pytest.raises(CounterResetError) as exc_info:
            snapshot_delta("snmp-10.0.0.5", start, end)

        assert exc_info.value.previous == 5000
        assert exc_info.value.current == 12


class TestMappings:

    def test_default_mapping_order(self):
        """Should list Ricoh counters before Printer-MIB life counts."""
        mapping = default_counter_oids()
        assert [str(o) for o in mapping.bw] == [
            RICOH.COUNTER_BW_COPIER, RICOH.COUNTER_BW_PRINTER, PRINTER_MIB.MARKER_LIFECOUNT_1,
        ]
        assert [str(o) for o in mapping.color] == [
            RICOH.COUNTER_COLOR_COPIER, RICOH.COUNTER_COLOR_PRINTER, PRINTER_MIB.MARKER_LIFECOUNT_2,
        ]
        assert [str(o) for o in mapping.total] == [PRINTER_MIB.MARKER_LIFECOUNT_3]

    def test_mapping_from_walk(self):
        """Should map marker counts and list other numeric OIDs as totals."""
        varbinds = [
            counter("1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.17", 4),
            counter(PRINTER_MIB.MARKER_LIFECOUNT_2, 20),
            counter(PRINTER_MIB.MARKER_LIFECOUNT_1, 10),
            counter(PRINTER_MIB.MARKER_LIFECOUNT_3, 30),
            text("1.3.6.1.2.1.43.5.1.1.16.1", "MP C3004"),
            vb("1.3.6.1.2.1.43.18.1.1.5.1.1", SnmpValue.timeticks(5000)),
            counter("1.3.6.1.2.1.43.10.2.1.4.1.3", 30),
        ]

        mapping = counter_oids_from_walk(varbinds)

        assert [str(o) for o in mapping.bw] == [PRINTER_MIB.MARKER_LIFECOUNT_1]
        assert [str(o) for o in mapping.color] == [PRINTER_MIB.MARKER_LIFECOUNT_2]
        assert [str(o) for o in mapping.total] == [
            PRINTER_MIB.MARKER_LIFECOUNT_3,
            PRINTER_MIB.MARKER_LIFECOUNT_1,
            PRINTER_MIB.MARKER_LIFECOUNT_2,
            "1.3.6.1.4.1.367.3.2.1.2.19.5.1.9.17",
        ]

    def test_parse_oid_list(self):
        assert parse_oid_list("1.3.6.1, .1.3.6.2\n1.3.6.3") == oids("1.3.6.1", "1.3.6.2", "1.3.6.3")

    def test_parse_oid_list_rejects_bad_entry(self):
        with pytest.raises(OidParseError):
            parse_oid_list("1.3.6.1, sysDescr")

    def test_format_oid_list(self):
        assert format_oid_list(oids("1.3.6.1", "1.3.6.2")) == "1.3.6.1, 1.3.6.2"

    def test_warning_text(self):
        assert str(CounterWarning.missing(CounterKind.TOTAL)) == "Missing total counter"

"""
printwatch - Counter Resolver.

Turns a poll response plus a CounterOidSet into a normalized
CounterSnapshot. This is the single place the normalization rules live:

    bw AND color resolved  -> BW_COLOR   (total fetched, or derived bw + color)
    else total resolved    -> TOTAL_ONLY (missing bw/color warned, fallback warned)
    else bw OR color       -> PARTIAL    (every absent category warned)
    else                   -> MISSING    (all three warned)

Within a category, candidates are tried in order; the first numeric
value wins. A present but non-numeric value is warned about and the
scan moves on. noSuchObject/noSuchInstance/endOfMibView count as absent.

Also here: usage deltas between snapshots, the default Ricoh +
Printer-MIB mapping, mappings built from a crawl, and parsing of
user-entered OID lists.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import CounterResetError, MissingCountersError
from .models import CounterOids, CounterOidSet, CounterSnapshot
from .oids import PRINTER_MIB, RICOH
from .snmp.oid import Oid
from .snmp.parsers import split_oid_text
from .snmp.values import SnmpVarBind


class CounterKind(str, Enum):
    """Counter categories."""
    BW = "bw"
    COLOR = "color"
    TOTAL = "total"


class CounterMode(str, Enum):
    """Which categories a device actually exposed."""
    BW_COLOR = "bw_color"
    TOTAL_ONLY = "total_only"
    PARTIAL = "partial"
    MISSING = "missing"


class WarningCode(str, Enum):
    MISSING = "missing"
    USED_TOTAL_FALLBACK = "used_total_fallback"
    DERIVED_TOTAL = "derived_total"
    NON_NUMERIC = "non_numeric"


@dataclass(frozen=True)
class CounterWarning:
    """A resolution warning; str() gives the display text."""
    code: WarningCode
    kind: Optional[CounterKind] = None
    oid: Optional[str] = None

    @classmethod
    def missing(cls, kind: CounterKind) -> 'CounterWarning':
        return cls(WarningCode.MISSING, kind)

    def __str__(self) -> str:
        if self.code == WarningCode.MISSING:
            return f"Missing {self.kind.value} counter"
        if self.code == WarningCode.USED_TOTAL_FALLBACK:
            return "Used total counter fallback"
        if self.code == WarningCode.DERIVED_TOTAL:
            return "Total counter derived from BW + Color"
        return f"Non-numeric {self.kind.value} counter at OID {self.oid}"


@dataclass
class CounterResolution:
    """Result of resolve_counters()."""
    snapshot: CounterSnapshot
    mode: CounterMode
    warnings: List[CounterWarning] = field(default_factory=list)
    raw_varbinds: List[SnmpVarBind] = field(default_factory=list)

    def missing_categories(self) -> List[CounterKind]:
        return [
            w.kind for w in self.warnings
            if w.code == WarningCode.MISSING and w.kind is not None
        ]

    def has_warning(self, code: WarningCode, kind: Optional[CounterKind] = None) -> bool:
        return any(
            w.code == code and (kind is None or w.kind == kind)
            for w in self.warnings
        )

    def ensure_complete(self, printer_id: str) -> 'CounterResolution':
        """
        Raise if no usable page count came back.

        BW_COLOR and TOTAL_ONLY both yield a total and pass.

        Raises:
            MissingCountersError: mode is PARTIAL or MISSING
        """
        if self.mode in (CounterMode.BW_COLOR, CounterMode.TOTAL_ONLY):
            return self
        missing = ", ".join(kind.value for kind in self.missing_categories())
        raise MissingCountersError(printer_id, missing)

    def to_dict(self) -> Dict:
        return {
            "mode": self.mode.value,
            "snapshot": self.snapshot.to_dict(),
            "warnings": [str(w) for w in self.warnings],
        }


def _find_counter(
    kind: CounterKind,
    candidates: Sequence[Oid],
    varbinds: Sequence[SnmpVarBind],
    warnings: List[CounterWarning],
) -> Tuple[Optional[int], Optional[Oid]]:
    for candidate in candidates:
        varbind = next((vb for vb in varbinds if vb.oid == candidate), None)
        if varbind is None or varbind.value.is_missing():
            continue

        value = varbind.value.as_unsigned()
        if value is not None:
            return value, candidate

        warnings.append(CounterWarning(WarningCode.NON_NUMERIC, kind, str(candidate)))

    return None, None


def resolve_counters(
    timestamp: int,
    oids: CounterOidSet,
    varbinds: Sequence[SnmpVarBind],
) -> CounterResolution:
    """
    Resolve bw/color/total counters from a response.

    Args:
        timestamp: Snapshot time (epoch seconds)
        oids: Candidate OIDs per category, in priority order
        varbinds: Response varbinds

    Returns:
        CounterResolution with snapshot, mode, warnings and the raw varbinds
    """
    warnings: List[CounterWarning] = []

    bw, bw_oid = _find_counter(CounterKind.BW, oids.bw, varbinds, warnings)
    color, color_oid = _find_counter(CounterKind.COLOR, oids.color, varbinds, warnings)
    total, total_oid = _find_counter(CounterKind.TOTAL, oids.total, varbinds, warnings)

    snapshot = CounterSnapshot(timestamp=timestamp)

    if bw is not None and color is not None:
        snapshot.bw = bw
        snapshot.color = color
        if total is not None:
            snapshot.total = total
        else:
            # Computed, not fetched: no audit OID for total
            snapshot.total = bw + color
            warnings.append(CounterWarning(WarningCode.DERIVED_TOTAL))
        mode = CounterMode.BW_COLOR

    elif total is not None:
        snapshot.total = total
        if bw is None:
            warnings.append(CounterWarning.missing(CounterKind.BW))
        if color is None:
            warnings.append(CounterWarning.missing(CounterKind.COLOR))
        warnings.append(CounterWarning(WarningCode.USED_TOTAL_FALLBACK))
        mode = CounterMode.TOTAL_ONLY

    else:
        snapshot.bw = bw
        snapshot.color = color
        if bw is None:
            warnings.append(CounterWarning.missing(CounterKind.BW))
        if color is None:
            warnings.append(CounterWarning.missing(CounterKind.COLOR))
        warnings.append(CounterWarning.missing(CounterKind.TOTAL))
        mode = CounterMode.PARTIAL if (bw is not None or color is not None) else CounterMode.MISSING

    # Audit OIDs follow the values actually carried in the snapshot
    snapshot.source_oids = CounterOids(
        bw=str(bw_oid) if snapshot.bw is not None else None,
        color=str(color_oid) if snapshot.color is not None else None,
        total=str(total_oid) if snapshot.total is not None and total_oid is not None else None,
    )

    return CounterResolution(
        snapshot=snapshot,
        mode=mode,
        warnings=warnings,
        raw_varbinds=list(varbinds),
    )


def snapshot_delta(
    printer_id: str,
    start: CounterSnapshot,
    end: CounterSnapshot,
) -> CounterSnapshot:
    """
    Pages printed between two snapshots, per category.

    A category is None unless both snapshots carry it. The result is
    stamped with the end snapshot's time and source OIDs.

    Raises:
        CounterResetError: a counter is lower at end than at start
    """
    def delta(before: Optional[int], after: Optional[int]) -> Optional[int]:
        if before is None or after is None:
            return None
        if after < before:
            raise CounterResetError(printer_id, before, after)
        return after - before

    return CounterSnapshot(
        timestamp=end.timestamp,
        bw=delta(start.bw, end.bw),
        color=delta(start.color, end.color),
        total=delta(start.total, end.total),
        source_oids=end.source_oids,
    )


# =============================================================================
# Counter OID mappings
# =============================================================================

MARKER_LIFECOUNT_1 = Oid.parse(PRINTER_MIB.MARKER_LIFECOUNT_1)
MARKER_LIFECOUNT_2 = Oid.parse(PRINTER_MIB.MARKER_LIFECOUNT_2)
MARKER_LIFECOUNT_3 = Oid.parse(PRINTER_MIB.MARKER_LIFECOUNT_3)


def default_counter_oids() -> CounterOidSet:
    """Ricoh copier/printer counters first, then Printer-MIB life counts."""
    return CounterOidSet(
        bw=[
            Oid.parse(RICOH.COUNTER_BW_COPIER),
            Oid.parse(RICOH.COUNTER_BW_PRINTER),
            MARKER_LIFECOUNT_1,
        ],
        color=[
            Oid.parse(RICOH.COUNTER_COLOR_COPIER),
            Oid.parse(RICOH.COUNTER_COLOR_PRINTER),
            MARKER_LIFECOUNT_2,
        ],
        total=[MARKER_LIFECOUNT_3],
    )


def counter_oids_from_walk(varbinds: Sequence[SnmpVarBind]) -> CounterOidSet:
    """
    Build a mapping from crawled varbinds.

    Only numeric values are considered. Marker life count 1 maps to bw,
    2 to color; total lists life count 3 first, then every other numeric
    OID in ascending order.
    """
    candidates = sorted({
        vb.oid for vb in varbinds
        if vb.oid is not None and vb.value.as_unsigned() is not None
    })

    mapping = CounterOidSet()
    if MARKER_LIFECOUNT_1 in candidates:
        mapping.bw.append(MARKER_LIFECOUNT_1)
    if MARKER_LIFECOUNT_2 in candidates:
        mapping.color.append(MARKER_LIFECOUNT_2)
    if MARKER_LIFECOUNT_3 in candidates:
        mapping.total.append(MARKER_LIFECOUNT_3)

    for oid in candidates:
        if oid not in mapping.total:
            mapping.total.append(oid)

    return mapping


def parse_oid_list(text: str) -> List[Oid]:
    """
    Parse a comma and/or whitespace separated OID list.

    Raises:
        OidParseError: on the first malformed entry
    """
    return [Oid.parse(token) for token in split_oid_text(text)]


def format_oid_list(oids: Sequence[Oid]) -> str:
    return ", ".join(str(oid) for oid in oids)

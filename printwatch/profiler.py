"""
printwatch - Ricoh Device Profiler.

Classifies a device as Ricoh (by sysObjectID prefix or "ricoh" in
sysDescr), extracts the model string that follows the vendor name, and
infers which counter categories the model exposes.

    >>> profile = identify_device(None, "RICOH IM C3000 1.02")
    >>> profile.match_status, profile.strategy
    (<VendorMatch.KNOWN: 'known'>, <CounterStrategy.BW_COLOR_PREFERRED: 'bw_color_preferred'>)
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import UnsupportedModelError
from .models import PrinterRecord
from .oids import RICOH

RICOH_KEYWORD = re.compile(r"ricoh", re.IGNORECASE)

# Checked in order against the lowercased model string
COLOR_PREFIXES = ("im c", "mp c", "sp c", "mpcw", "imc", "mpc", "spc")
MONO_PREFIXES = ("im ", "mp ", "sp ")


class VendorMatch(str, Enum):
    """How well a device matched the Ricoh profile."""
    NOT_RICOH = "not_ricoh"
    UNMAPPED = "unmapped"
    KNOWN = "known"


class CounterStrategy(str, Enum):
    """How counters should be read for a model."""
    BW_COLOR_PREFERRED = "bw_color_preferred"
    BW_ONLY = "bw_only"
    TOTAL_ONLY = "total_only"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CounterAvailability:
    """Which counter categories a model is expected to expose."""
    bw: bool = False
    color: bool = False
    total: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"bw": self.bw, "color": self.color, "total": self.total}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CounterAvailability':
        return cls(
            bw=bool(data.get("bw", False)),
            color=bool(data.get("color", False)),
            total=bool(data.get("total", False)),
        )


NO_COUNTERS = CounterAvailability()
COLOR_COUNTERS = CounterAvailability(bw=True, color=True, total=True)
MONO_COUNTERS = CounterAvailability(bw=True, color=False, total=True)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def is_ricoh_sys_object_id(sys_object_id: str) -> bool:
    """
    True if the OID sits under enterprises.ricoh (1.3.6.1.4.1.367).

    Matches whole arcs, so 1.3.6.1.4.1.3670 (another enterprise) is not Ricoh.
    """
    oid = sys_object_id.lstrip(".")
    return oid == RICOH.BASE or oid.startswith(RICOH.BASE + ".")


def extract_model(sys_descr: str) -> Optional[str]:
    """Text after the first "ricoh" in sysDescr, trimmed."""
    match = RICOH_KEYWORD.search(sys_descr)
    if not match:
        return None
    return _clean(sys_descr[match.end():])


def infer_color_capable(model: str) -> Optional[bool]:
    """True for color models, False for mono, None if unmapped."""
    lowered = model.strip().lower()
    if lowered.startswith(COLOR_PREFIXES):
        return True
    if lowered.startswith(MONO_PREFIXES):
        return False
    return None


@dataclass
class RicohProfile:
    """Result of Ricoh identification."""
    match_status: VendorMatch
    model: Optional[str] = None
    sys_object_id: Optional[str] = None
    sys_descr: Optional[str] = None
    counters: CounterAvailability = NO_COUNTERS
    strategy: CounterStrategy = CounterStrategy.UNKNOWN
    notes: List[str] = field(default_factory=list)

    @property
    def is_ricoh(self) -> bool:
        return self.match_status != VendorMatch.NOT_RICOH

    @property
    def color_capable(self) -> bool:
        return self.counters.color

    @classmethod
    def identify(
        cls,
        sys_object_id: Optional[str],
        sys_descr: Optional[str],
    ) -> 'RicohProfile':
        """
        Identify a device from sysObjectID and sysDescr.

        Both inputs are trimmed; blank counts as absent.
        """
        sys_object_id = _clean(sys_object_id)
        sys_descr = _clean(sys_descr)

        by_oid = sys_object_id is not None and is_ricoh_sys_object_id(sys_object_id)
        by_descr = sys_descr is not None and RICOH_KEYWORD.search(sys_descr) is not None

        profile = cls(
            match_status=VendorMatch.NOT_RICOH,
            sys_object_id=sys_object_id,
            sys_descr=sys_descr,
        )

        if by_oid and not by_descr:
            profile.notes.append("Ricoh identified via sysObjectID.")
        if by_descr and not by_oid:
            profile.notes.append("Ricoh identified via sysDescr.")

        if not (by_oid or by_descr):
            return profile

        profile.model = extract_model(sys_descr) if sys_descr else None
        if profile.model is None:
            profile.match_status = VendorMatch.UNMAPPED
            profile.notes.append("Ricoh model string not found.")
            return profile

        color = infer_color_capable(profile.model)
        if color is None:
            profile.match_status = VendorMatch.UNMAPPED
            profile.notes.append("Unmapped Ricoh model; counter availability unknown.")
        elif color:
            profile.match_status = VendorMatch.KNOWN
            profile.counters = COLOR_COUNTERS
            profile.strategy = CounterStrategy.BW_COLOR_PREFERRED
        else:
            profile.match_status = VendorMatch.KNOWN
            profile.counters = MONO_COUNTERS
            profile.strategy = CounterStrategy.BW_ONLY

        return profile

    @classmethod
    def from_printer(cls, record: PrinterRecord) -> 'RicohProfile':
        """Identify from a stored record (model stands in for sysDescr)."""
        return cls.identify(record.sys_object_id, record.model)

    def ensure_supported(self) -> 'RicohProfile':
        """
        Raise for Ricoh devices whose model has no counter layout.

        Non-Ricoh devices pass; they are read with the generic mapping.

        Raises:
            UnsupportedModelError: match_status is UNMAPPED
        """
        if self.match_status == VendorMatch.UNMAPPED:
            raise UnsupportedModelError(self.model or self.sys_descr or "unknown")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "match_status": self.match_status.value,
            "model": self.model,
            "sys_object_id": self.sys_object_id,
            "sys_descr": self.sys_descr,
            "counters": self.counters.to_dict(),
            "strategy": self.strategy.value,
            "notes": list(self.notes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RicohProfile':
        """Create from dictionary; missing fields load as the defaults."""
        return cls(
            match_status=VendorMatch(data.get("match_status") or VendorMatch.NOT_RICOH.value),
            model=data.get("model"),
            sys_object_id=data.get("sys_object_id"),
            sys_descr=data.get("sys_descr"),
            counters=CounterAvailability.from_dict(data.get("counters") or {}),
            strategy=CounterStrategy(data.get("strategy") or CounterStrategy.UNKNOWN.value),
            notes=list(data.get("notes") or []),
        )


def identify_device(
    sys_object_id: Optional[str],
    sys_descr: Optional[str],
) -> RicohProfile:
    return RicohProfile.identify(sys_object_id, sys_descr)

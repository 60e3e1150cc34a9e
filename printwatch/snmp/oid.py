"""
printwatch - Numeric OID type.

An Oid is an ordered, non-empty tuple of 32-bit unsigned arcs.
Comparison is component-wise, which gives the same ordering agents
use for GET-NEXT traversal.

Usage:
    from printwatch.snmp.oid import Oid

    root = Oid.parse("1.3.6.1.2.1.43")
    oid = Oid.parse(".1.3.6.1.2.1.43.10.2.1.4.1.1")
    assert oid.is_descendant_of(root)
    assert str(oid) == "1.3.6.1.2.1.43.10.2.1.4.1.1"
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from ..errors import OidParseError

MAX_ARC = 0xFFFFFFFF


@dataclass(frozen=True, order=True)
class Oid:
    """Numeric object identifier."""
    parts: Tuple[int, ...]

    def __post_init__(self):
        if not self.parts:
            raise OidParseError("", "OID must have at least one component")
        for part in self.parts:
            if not isinstance(part, int) or part < 0 or part > MAX_ARC:
                raise OidParseError(
                    ".".join(str(p) for p in self.parts),
                    f"component out of range: {part}",
                )

    @classmethod
    def parse(cls, text: str) -> 'Oid':
        """
        Parse dotted decimal text.

        Empty segments are skipped, so the net-snmp leading-dot form
        (".1.3.6") is accepted. Text yielding no components fails.

        Raises:
            OidParseError: empty input or a non-numeric component
        """
        parts = []
        for segment in text.strip().split('.'):
            if not segment:
                continue
            if not (segment.isascii() and segment.isdigit()):
                raise OidParseError(text, f"non-numeric component '{segment}'")
            value = int(segment)
            if value > MAX_ARC:
                raise OidParseError(text, f"component out of range: {segment}")
            parts.append(value)

        if not parts:
            raise OidParseError(text, "OID must have at least one component")

        return cls(tuple(parts))

    @classmethod
    def from_parts(cls, parts: Iterable[int]) -> 'Oid':
        return cls(tuple(parts))

    @classmethod
    def coerce(cls, value: Union['Oid', str]) -> 'Oid':
        """Accept either an Oid or its text form."""
        if isinstance(value, Oid):
            return value
        return cls.parse(value)

    def is_descendant_of(self, root: 'Oid') -> bool:
        """True if root is a (non-strict) prefix of this OID."""
        return (
            len(self.parts) >= len(root.parts)
            and self.parts[:len(root.parts)] == root.parts
        )

    def child(self, *arcs: int) -> 'Oid':
        return Oid(self.parts + tuple(arcs))

    def __len__(self) -> int:
        return len(self.parts)

    def __str__(self) -> str:
        return ".".join(str(part) for part in self.parts)

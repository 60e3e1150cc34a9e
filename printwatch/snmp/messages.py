"""
printwatch - SNMP request and response types.

Plain containers passed to and returned from an SnmpClient. Nothing
here holds a socket or engine; each client call owns its transport.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .oid import Oid
from .values import SnmpVarBind

DEFAULT_SNMP_PORT = 161


@dataclass(frozen=True)
class SnmpAddress:
    """SNMP agent endpoint."""
    host: str
    port: int = DEFAULT_SNMP_PORT

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnmpAddress':
        return cls(
            host=data["host"],
            port=int(data.get("port") or DEFAULT_SNMP_PORT),
        )


# =============================================================================
# Requests / responses
# =============================================================================

@dataclass
class SnmpRequest:
    """GET request for an explicit OID set."""
    address: SnmpAddress
    oids: List[Oid]
    community: Optional[str] = None


@dataclass
class SnmpWalkRequest:
    """
    GET-NEXT walk from a root OID.

    max_results bounds the number of steps; 0 means unbounded.
    """
    address: SnmpAddress
    root_oid: Oid
    community: Optional[str] = None
    max_results: int = 64


@dataclass
class SnmpResponse:
    """Varbinds returned for a request, in agent order."""
    address: SnmpAddress
    varbinds: List[SnmpVarBind] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address.to_dict(),
            "varbinds": [vb.to_dict() for vb in self.varbinds],
        }

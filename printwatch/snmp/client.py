"""
printwatch - SNMP Client.

Async SNMP GET / GET-NEXT client on pysnmp.hlapi.v3arch.asyncio.

Features:
- Interface (SnmpClient) with a real and an in-memory implementation,
  picked at construction time
- GET batching: OID sets larger than 24 go out as sequential requests,
  results concatenated in submission order
- Per-attempt timeout and bounded retry (whole batch is re-issued)
- Authentication failures are classified and never retried
- WALK via repeated GET-NEXT with loop/stall/scope termination
- No pooled sessions: every request builds and closes its own engine

Usage:
    from printwatch.snmp.client import SnmpV2cClient

    client = SnmpV2cClient(SnmpConfig(community="public"))

    response = await client.get(SnmpRequest(address, [Oid.parse("1.3.6.1.2.1.1.1.0")]))
    subtree = await client.walk(SnmpWalkRequest(address, Oid.parse("1.3.6.1.2.1.43")))
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from pysnmp.hlapi.v3arch.asyncio import (
    get_cmd, next_cmd,
    SnmpEngine, CommunityData,
    UdpTransportTarget, ContextData,
    ObjectType, ObjectIdentity,
)
from pysnmp.proto import errind

from ..config import SnmpConfig
from ..errors import SnmpAuthError, SnmpError, SnmpFailureError, SnmpTimeoutError
from .messages import SnmpAddress, SnmpRequest, SnmpResponse, SnmpWalkRequest
from .oid import Oid
from .parsers import convert_var_binds
from .values import SnmpVarBind, ValueKind

log = logging.getLogger("printwatch.snmp")

# Maximum OIDs per GET PDU
GET_BATCH_SIZE = 24

# error-status values that mean the community was refused
AUTH_ERROR_STATUSES = {
    6,   # noAccess
    16,  # authorizationError
}

AUTH_ERROR_MARKERS = (
    "authorization",
    "unknowncommunityname",
    "community",
    "noaccess",
)

T = TypeVar("T")


def batched(oids: Sequence[Oid], size: int = GET_BATCH_SIZE) -> List[List[Oid]]:
    """Split an OID list into consecutive batches of at most size."""
    return [list(oids[i:i + size]) for i in range(0, len(oids), size)]


class SnmpClient(ABC):
    """
    SNMP client interface.

    Subclasses implement get() and get_next(); walk() is built once
    here on top of get_next().

    Attributes:
        config: Default community, timeout, retries and port
    """

    def __init__(self, config: Optional[SnmpConfig] = None):
        self.config = config or SnmpConfig()

    def community_for(self, community: Optional[str]) -> str:
        """Request community, or the configured default when absent/blank."""
        if community and community.strip():
            return community
        return self.config.community

    @abstractmethod
    async def get(self, request: SnmpRequest) -> SnmpResponse:
        """Fetch the values of an explicit OID set."""

    @abstractmethod
    async def get_next(
        self,
        address: SnmpAddress,
        community: Optional[str],
        oid: Oid,
    ) -> List[SnmpVarBind]:
        """Fetch the lexicographically next varbind(s) after oid."""

    async def walk(self, request: SnmpWalkRequest) -> SnmpResponse:
        """
        Walk a subtree with repeated GET-NEXT.

        Stops when the agent returns an unparsable OID, an OID outside the
        root, the same OID as the current cursor, an empty varbind set,
        endOfMibView, or after max_results steps (0 = unbounded).

        Errors from get_next() propagate unchanged.

        Returns:
            SnmpResponse with accepted varbinds in discovery order
        """
        root = request.root_oid
        cursor = root
        results: List[SnmpVarBind] = []
        steps = 0

        log.debug(
            f"SNMP WALK {request.address} root={root} max_results={request.max_results}"
        )

        while request.max_results == 0 or steps < request.max_results:
            steps += 1
            varbinds = await self.get_next(request.address, request.community, cursor)

            progressed = False
            done = False
            for varbind in varbinds:
                if varbind.oid is None:
                    log.debug(f"Walk {request.address}: unparsable OID, stopping")
                    done = True
                    break
                if not varbind.oid.is_descendant_of(root):
                    log.debug(f"Walk {request.address}: left {root} at {varbind.oid}")
                    done = True
                    break
                if varbind.oid == cursor:
                    log.debug(f"Walk {request.address}: OID {cursor} repeated, stopping")
                    done = True
                    break
                if varbind.value.kind == ValueKind.END_OF_MIB_VIEW:
                    done = True
                    break

                results.append(varbind)
                cursor = varbind.oid
                progressed = True

            if done or not progressed:
                break

        log.debug(f"SNMP WALK {request.address} complete: {len(results)} varbinds in {steps} steps")
        return SnmpResponse(address=request.address, varbinds=results)


class SnmpV2cClient(SnmpClient):
    """
    SNMPv2c client backed by pysnmp.

    Each attempt creates its own SnmpEngine and UDP transport and closes
    the engine's dispatcher afterwards. Transport-level retries are
    disabled; retries are driven here so that auth failures can be
    excluded and every retry re-issues the whole batch.
    """

    async def get(self, request: SnmpRequest) -> SnmpResponse:
        """
        Fetch an explicit OID set, 24 OIDs per request.

        Raises:
            SnmpAuthError: community rejected (not retried)
            SnmpTimeoutError: no response within timeout after all retries
            SnmpFailureError: any other transport/protocol fault
        """
        community = self.community_for(request.community)
        address = request.address
        varbinds: List[SnmpVarBind] = []

        log.debug(f"SNMP GET {address} oids={len(request.oids)}")

        for batch in batched(request.oids):
            result = await self._with_retries(
                address,
                lambda batch=batch: self._request(get_cmd, address, community, batch),
            )
            varbinds.extend(result)

        log.debug(f"SNMP GET {address} ok: {len(varbinds)} varbinds")
        return SnmpResponse(address=address, varbinds=varbinds)

    async def get_next(
        self,
        address: SnmpAddress,
        community: Optional[str],
        oid: Oid,
    ) -> List[SnmpVarBind]:
        community = self.community_for(community)
        return await self._with_retries(
            address,
            lambda: self._request(next_cmd, address, community, [oid]),
        )

    async def _with_retries(
        self,
        address: SnmpAddress,
        attempt: Callable[[], Awaitable[T]],
    ) -> T:
        """Run attempt() up to 1 + retries times; auth errors are final."""
        attempts = 0
        while True:
            try:
                return await attempt()
            except SnmpAuthError:
                log.warning(f"SNMP authentication failed for {address}")
                raise
            except SnmpError as e:
                if attempts >= self.config.retries:
                    log.warning(f"SNMP request to {address} failed: {e}")
                    raise
                attempts += 1
                log.debug(f"SNMP retry {attempts}/{self.config.retries} for {address}: {e}")

    async def _request(
        self,
        command: Callable[..., Awaitable[Any]],
        address: SnmpAddress,
        community: str,
        oids: Sequence[Oid],
    ) -> List[SnmpVarBind]:
        """Issue one GET or GET-NEXT PDU."""
        label = str(address)
        timeout = self.config.timeout
        engine = SnmpEngine()

        try:
            transport = await UdpTransportTarget.create(
                (address.host, address.port),
                timeout=timeout,
                retries=0,
            )

            error_indication, error_status, error_index, var_binds = await asyncio.wait_for(
                command(
                    engine,
                    CommunityData(community, mpModel=1),
                    transport,
                    ContextData(),
                    *[ObjectType(ObjectIdentity(str(oid))) for oid in oids],
                    lookupMib=False,
                ),
                timeout=timeout + 2  # Extra time for network
            )
        except asyncio.TimeoutError:
            raise SnmpTimeoutError(label, self.config.timeout_ms)
        except Exception as e:
            raise SnmpFailureError(label, f"{type(e).__name__}: {e}") from e
        finally:
            engine.close_dispatcher()

        if error_indication:
            raise self._classify_indication(label, error_indication)

        if error_status and int(error_status):
            raise self._classify_status(label, error_status, error_index, oids)

        return convert_var_binds(var_binds)

    def _classify_indication(self, label: str, error_indication: Any) -> SnmpError:
        if isinstance(error_indication, errind.RequestTimedOut):
            return SnmpTimeoutError(label, self.config.timeout_ms)

        text = str(error_indication)
        lowered = text.lower()
        if "timeout" in lowered or "timed out" in lowered:
            return SnmpTimeoutError(label, self.config.timeout_ms)
        if any(marker in lowered for marker in AUTH_ERROR_MARKERS):
            return SnmpAuthError(label)
        return SnmpFailureError(label, text)

    def _classify_status(
        self,
        label: str,
        error_status: Any,
        error_index: Any,
        oids: Sequence[Oid],
    ) -> SnmpError:
        status = int(error_status)
        if status in AUTH_ERROR_STATUSES:
            return SnmpAuthError(label)

        name = error_status.prettyPrint() if hasattr(error_status, 'prettyPrint') else str(status)
        index = int(error_index) if error_index else 0
        if 0 < index <= len(oids):
            return SnmpFailureError(label, f"{name} at {oids[index - 1]}")
        return SnmpFailureError(label, name)


# =============================================================================
# Convenience Functions
# =============================================================================

async def snmp_get(
    host: str,
    oids: Sequence[str],
    config: Optional[SnmpConfig] = None,
    community: Optional[str] = None,
) -> SnmpResponse:
    """
    Quick GET without managing a client.

    Example:
        response = await snmp_get("192.168.1.50", ["1.3.6.1.2.1.1.1.0"])
    """
    client = SnmpV2cClient(config)
    address = SnmpAddress(host, client.config.port)
    return await client.get(
        SnmpRequest(address, [Oid.parse(oid) for oid in oids], community)
    )


async def snmp_walk(
    host: str,
    root: str,
    config: Optional[SnmpConfig] = None,
    community: Optional[str] = None,
    max_results: int = 0,
) -> SnmpResponse:
    """Quick WALK without managing a client."""
    client = SnmpV2cClient(config)
    address = SnmpAddress(host, client.config.port)
    return await client.walk(
        SnmpWalkRequest(address, Oid.parse(root), community, max_results)
    )

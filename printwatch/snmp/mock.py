"""
printwatch - In-memory SNMP client.

Deterministic SnmpClient for tests and offline runs. Responses and
errors are queued up front and handed out FIFO by get() and get_next();
walk() comes from the base class, so walk termination is exercised
against the same code the real client uses.

Usage:
    client = MockSnmpClient()
    client.push_varbinds([SnmpVarBind(oid, SnmpValue.counter32(100))])
    client.push_error(SnmpTimeoutError("10.0.0.5:161", 2000))
"""

import threading
from collections import deque
from typing import Deque, List, Optional, Tuple, Union

from ..config import SnmpConfig
from ..errors import PrintwatchError, SnmpFailureError
from .client import SnmpClient
from .messages import SnmpAddress, SnmpRequest, SnmpResponse
from .oid import Oid
from .values import SnmpVarBind

QueuedItem = Union[SnmpResponse, List[SnmpVarBind], PrintwatchError]


class MockSnmpClient(SnmpClient):
    """
    Queue-backed SnmpClient.

    The queue lock is held only for the push/pop itself, never across
    an await.

    Attributes:
        calls: ("get" | "get_next", address, community, oids) per call, in order
    """

    def __init__(self, config: Optional[SnmpConfig] = None):
        super().__init__(config)
        self._queue: Deque[QueuedItem] = deque()
        self._lock = threading.Lock()
        self.calls: List[Tuple[str, SnmpAddress, str, List[Oid]]] = []

    def push_response(self, response: SnmpResponse) -> None:
        with self._lock:
            self._queue.append(response)

    def push_varbinds(self, varbinds: List[SnmpVarBind]) -> None:
        with self._lock:
            self._queue.append(list(varbinds))

    def push_error(self, error: PrintwatchError) -> None:
        with self._lock:
            self._queue.append(error)

    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    def _pop(
        self,
        kind: str,
        address: SnmpAddress,
        community: str,
        oids: List[Oid],
    ) -> List[SnmpVarBind]:
        with self._lock:
            self.calls.append((kind, address, community, oids))
            item = self._queue.popleft() if self._queue else None

        if item is None:
            raise SnmpFailureError(str(address), "MockSnmpClient queue is empty")
        if isinstance(item, PrintwatchError):
            raise item
        if isinstance(item, SnmpResponse):
            return list(item.varbinds)
        return list(item)

    async def get(self, request: SnmpRequest) -> SnmpResponse:
        community = self.community_for(request.community)
        varbinds = self._pop("get", request.address, community, list(request.oids))
        return SnmpResponse(address=request.address, varbinds=varbinds)

    async def get_next(
        self,
        address: SnmpAddress,
        community: Optional[str],
        oid: Oid,
    ) -> List[SnmpVarBind]:
        community = self.community_for(community)
        return self._pop("get_next", address, community, [oid])

"""
printwatch - Discovery Engine.

Sweeps a CIDR range with probe_printer(), keeping at most `concurrency`
probes in flight. Each finished probe admits the next queued host, so
the pool refills as results arrive instead of waiting on whole batches.

Cancellation is soft: stop() bumps the run id and clears the queue.
Probes already on the wire run to completion and their results, tagged
with the old run id, are dropped on arrival.

Usage:
    engine = DiscoveryEngine(SnmpConfig(community="public"))
    engine.events.subscribe(ConsoleEventPrinter().handle_event)
    result = await engine.run("192.168.1.0/24")
    for record in result.printers:
        print(record.host, record.model)
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Set, Tuple, Union

from ..config import DISCOVERY_CONCURRENCY, SnmpConfig
from ..errors import DiscoveryFailureError, PrintwatchError, SnmpFailureError
from ..events import EventEmitter, LogLevel
from ..models import PrinterRecord
from ..registry import PrinterRegistry
from ..snmp.client import SnmpClient, SnmpV2cClient
from ..snmp.messages import SnmpAddress
from .prober import normalize_community, probe_printer
from .ranges import CidrRange

log = logging.getLogger("printwatch.discovery")

ProbeFunc = Callable[..., Awaitable[Optional[PrinterRecord]]]

# What a probe task reports back: a record, None (not a printer) or an error
ProbeOutcome = Union[PrinterRecord, None, PrintwatchError]


@dataclass
class DiscoveryRunResult:
    """
    Outcome of one discovery run.

    Printers and errors are recorded in arrival order.
    """
    run_id: int
    cidr: str
    host_count: int = 0
    printers: List[PrinterRecord] = field(default_factory=list)
    not_printers: int = 0
    errors: List[Tuple[str, PrintwatchError]] = field(default_factory=list)
    stopped: bool = False

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def probed(self) -> int:
        return len(self.printers) + self.not_printers + len(self.errors)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def as_error(self) -> Optional[DiscoveryFailureError]:
        """
        Collapse a run where every response was an error.

        Returns:
            DiscoveryFailureError scoped to the range when hosts errored
            and no printer was found, otherwise None
        """
        if self.printers or not self.errors:
            return None
        host, last = self.errors[-1]
        details = (
            f"{len(self.errors)} of {self.probed} hosts failed; "
            f"last error from {host}: {last.user_summary()}"
        )
        return DiscoveryFailureError(self.cidr, details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "cidr": self.cidr,
            "host_count": self.host_count,
            "probed": self.probed,
            "printers": [p.to_dict() for p in self.printers],
            "not_printers": self.not_printers,
            "errors": [
                {"host": host, "summary": e.user_summary(), "detail": e.technical_detail()}
                for host, e in self.errors
            ],
            "stopped": self.stopped,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
        }


class DiscoveryEngine:
    """
    Concurrent printer discovery over a CIDR range.

    Args:
        config: SNMP defaults (community, timeout, retries, port)
        concurrency: Maximum probes in flight
        client: Shared SnmpClient (SnmpV2cClient(config) if omitted)
        probe: Probe coroutine, probe_printer() unless replaced
        events: Event emitter (created if not provided)
        registry: Registry that found printers are upserted into

    All state is touched from the event loop thread only; no lock is
    needed and none is held across an await.
    """

    def __init__(
        self,
        config: Optional[SnmpConfig] = None,
        concurrency: int = DISCOVERY_CONCURRENCY,
        client: Optional[SnmpClient] = None,
        probe: ProbeFunc = probe_printer,
        events: Optional[EventEmitter] = None,
        registry: Optional[PrinterRegistry] = None,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self.config = config or SnmpConfig()
        self.concurrency = concurrency
        self.client = client or SnmpV2cClient(self.config)
        self.probe = probe
        self.events = events or EventEmitter()
        self.registry = registry if registry is not None else PrinterRegistry()

        self._run_id = 0
        self._active = False
        self._queue: Deque[SnmpAddress] = deque()
        self._in_flight = 0
        self._community: Optional[str] = None
        self._result: Optional[DiscoveryRunResult] = None
        self._done: Optional[asyncio.Event] = None

        # Strong references so running probes are not garbage collected
        self._tasks: Set[asyncio.Task] = set()

    @property
    def run_id(self) -> int:
        return self._run_id

    @property
    def active(self) -> bool:
        return self._active

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def queued(self) -> int:
        return len(self._queue)

    @property
    def result(self) -> Optional[DiscoveryRunResult]:
        return self._result

    # =========================================================================
    # Run control
    # =========================================================================

    def start(self, cidr: str, community: Optional[str] = None) -> int:
        """
        Begin a discovery run.

        Must be called from a running event loop. A run already in
        progress is stopped first.

        Args:
            cidr: Range such as "192.168.1.0/24"
            community: Community override (blank = config default)

        Returns:
            The new run id

        Raises:
            CidrParseError: cidr is malformed
            DiscoveryFailureError: the range has no usable hosts
        """
        hosts = CidrRange.parse(cidr)
        queue: Deque[SnmpAddress] = deque(
            SnmpAddress(str(ip), self.config.port) for ip in hosts.hosts()
        )
        if not queue:
            raise DiscoveryFailureError(cidr, "CIDR contains no usable hosts.")

        if self._active:
            self.stop()

        self._run_id += 1
        self._active = True
        self._queue = queue
        self._in_flight = 0
        self._community = normalize_community(community)
        self._done = asyncio.Event()
        self._result = DiscoveryRunResult(
            run_id=self._run_id,
            cidr=str(hosts),
            host_count=len(queue),
            started_at=datetime.now(),
        )

        log.info(f"Discovery run {self._run_id} started on {hosts} ({len(queue)} hosts)")
        self.events.run_started(self._run_id, str(hosts), len(queue), self.concurrency)

        self._admit()
        return self._run_id

    def stop(self) -> None:
        """
        Stop the active run.

        In-flight probes are not cancelled; their results are ignored.
        """
        if not self._active:
            return

        stopped_id = self._run_id
        self._run_id += 1
        self._active = False
        self._queue.clear()
        self._in_flight = 0

        result = self._result
        if result is not None:
            result.stopped = True
            result.completed_at = datetime.now()
            log.info(f"Discovery run {stopped_id} stopped after {result.probed} hosts")
            self.events.run_stopped(stopped_id, result.cidr)

        if self._done is not None:
            self._done.set()

    async def wait(self) -> DiscoveryRunResult:
        """Wait for the current run to complete or be stopped."""
        if self._result is None or self._done is None:
            raise RuntimeError("No discovery run has been started")
        result = self._result
        await self._done.wait()
        return result

    async def run(self, cidr: str, community: Optional[str] = None) -> DiscoveryRunResult:
        """Start a run and wait for it."""
        self.start(cidr, community)
        return await self.wait()

    # =========================================================================
    # Probe scheduling
    # =========================================================================

    def _admit(self) -> None:
        """Launch queued probes until the concurrency ceiling is reached."""
        while self._active and self._in_flight < self.concurrency and self._queue:
            address = self._queue.popleft()
            self._in_flight += 1
            self.events.probe_started(self._run_id, address.host)

            task = asyncio.create_task(
                self._probe_host(self._run_id, address, self._community)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _probe_host(
        self,
        run_id: int,
        address: SnmpAddress,
        community: Optional[str],
    ) -> None:
        try:
            outcome: ProbeOutcome = await self.probe(
                address, community, config=self.config, client=self.client
            )
        except PrintwatchError as e:
            outcome = e
        except Exception as e:
            log.exception(f"Unexpected probe failure for {address}")
            self.events.log(f"Unexpected probe failure: {e!r}", LogLevel.ERROR, address.host)
            outcome = SnmpFailureError(str(address), str(e) or type(e).__name__)

        self._handle_result(run_id, address, outcome)

    def _handle_result(self, run_id: int, address: SnmpAddress, outcome: ProbeOutcome) -> None:
        if run_id != self._run_id:
            log.debug(f"Dropping result for {address} from stale run {run_id}")
            return

        result = self._result
        self._in_flight = max(0, self._in_flight - 1)

        if isinstance(outcome, PrinterRecord):
            stored = self.registry.upsert(outcome)
            result.printers.append(stored)
            self.events.printer_found(run_id, address.host, stored.to_dict())
        elif outcome is None:
            result.not_printers += 1
            self.events.not_printer(run_id, address.host)
        else:
            result.errors.append((address.host, outcome))
            log.debug(f"Probe failed for {address}: {outcome.technical_detail()}")
            self.events.probe_failed(
                run_id, address.host, outcome.user_summary(), outcome.technical_detail()
            )

        if not self._queue and self._in_flight == 0:
            self._finish()
        else:
            self._admit()

    def _finish(self) -> None:
        result = self._result
        self._active = False
        result.completed_at = datetime.now()

        duration = result.duration_seconds or 0.0
        log.info(
            f"Discovery run {result.run_id} complete: {len(result.printers)} printers, "
            f"{len(result.errors)} errors in {duration:.1f}s"
        )
        self.events.run_complete(result.run_id, result.cidr, duration)

        if self._done is not None:
            self._done.set()

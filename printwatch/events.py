"""
printwatch - Discovery Event System.

Structured events emitted by the discovery engine. A CLI prints them,
a dashboard would update widgets from them; the engine does not care.

Event Flow:
    run_started -> probe_started* -> printer_found / not_printer /
    probe_failed -> ... -> run_complete | run_stopped

Every result event is followed by stats_updated.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

log = logging.getLogger("printwatch.events")


class EventType(str, Enum):
    """Discovery event types."""
    # Run lifecycle
    RUN_STARTED = "run_started"
    RUN_COMPLETE = "run_complete"
    RUN_STOPPED = "run_stopped"

    # Per-host probes
    PROBE_STARTED = "probe_started"
    PRINTER_FOUND = "printer_found"
    NOT_PRINTER = "not_printer"
    PROBE_FAILED = "probe_failed"

    # Aggregated updates
    STATS_UPDATED = "stats_updated"

    LOG_MESSAGE = "log_message"


class LogLevel(str, Enum):
    """Log message severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass
class DiscoveryStats:
    """Progress counters for the current run."""
    total: int = 0           # Hosts in the range
    probed: int = 0          # Probes finished (any outcome)
    printers: int = 0
    not_printers: int = 0
    failed: int = 0
    queue: int = 0           # Hosts not yet admitted
    in_flight: int = 0

    current_host: str = ""
    status: str = "Ready"

    @property
    def progress(self) -> float:
        """Fraction of hosts probed, 0.0 to 1.0."""
        if self.total == 0:
            return 0.0
        return self.probed / self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "probed": self.probed,
            "printers": self.printers,
            "not_printers": self.not_printers,
            "failed": self.failed,
            "queue": self.queue,
            "in_flight": self.in_flight,
            "current_host": self.current_host,
            "status": self.status,
        }


@dataclass
class DiscoveryEvent:
    """
    Event emitted by the discovery engine.

    All events have a type, timestamp, and event-specific data.
    """
    event_type: EventType
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.data.get("message", "")

    @property
    def host(self) -> str:
        return self.data.get("host", "")

    @property
    def run_id(self) -> int:
        return self.data.get("run_id", 0)


EventCallback = Callable[[DiscoveryEvent], None]


class EventEmitter:
    """
    Event emitter for the discovery engine.

    Usage:
        emitter = EventEmitter()
        emitter.subscribe(my_handler)
        emitter.subscribe(stats_handler, EventType.STATS_UPDATED)
    """

    def __init__(self):
        self._listeners: List[Tuple[EventCallback, Optional[EventType]]] = []
        self._stats = DiscoveryStats()

    @property
    def stats(self) -> DiscoveryStats:
        return self._stats

    def reset_stats(self) -> None:
        self._stats = DiscoveryStats()

    def subscribe(
        self,
        callback: EventCallback,
        event_type: Optional[EventType] = None
    ) -> None:
        """
        Subscribe to events.

        Args:
            callback: Function to call with DiscoveryEvent
            event_type: If specified, only receive this event type
        """
        self._listeners.append((callback, event_type))

    def unsubscribe(self, callback: EventCallback) -> None:
        self._listeners = [
            (cb, et) for cb, et in self._listeners if cb != callback
        ]

    def clear(self) -> None:
        self._listeners.clear()

    def emit(self, event_type: EventType, **data) -> DiscoveryEvent:
        """Emit an event to all subscribed listeners."""
        event = DiscoveryEvent(
            event_type=event_type,
            timestamp=datetime.now(),
            data=data
        )

        for callback, filter_type in self._listeners:
            if filter_type is None or filter_type == event_type:
                try:
                    callback(event)
                except Exception:
                    # Listener errors never break discovery
                    log.exception(f"Event listener error on {event_type.value}")

        return event

    # =========================================================================
    # Convenience methods for common events
    # =========================================================================

    def run_started(self, run_id: int, cidr: str, host_count: int, concurrency: int) -> None:
        """Emit run started event and reset stats."""
        self.reset_stats()
        self._stats.total = host_count
        self._stats.queue = host_count
        self._stats.status = "Running"

        self.emit(
            EventType.RUN_STARTED,
            run_id=run_id,
            cidr=cidr,
            host_count=host_count,
            concurrency=concurrency,
        )
        self._emit_stats_update()

    def probe_started(self, run_id: int, host: str) -> None:
        self._stats.queue = max(0, self._stats.queue - 1)
        self._stats.in_flight += 1
        self._stats.current_host = host
        self.emit(EventType.PROBE_STARTED, run_id=run_id, host=host)

    def printer_found(self, run_id: int, host: str, record: Dict[str, Any]) -> None:
        self._finish_probe()
        self._stats.printers += 1
        self.emit(EventType.PRINTER_FOUND, run_id=run_id, host=host, printer=record)
        self._emit_stats_update()

    def not_printer(self, run_id: int, host: str) -> None:
        self._finish_probe()
        self._stats.not_printers += 1
        self.emit(EventType.NOT_PRINTER, run_id=run_id, host=host)
        self._emit_stats_update()

    def probe_failed(self, run_id: int, host: str, error: str, detail: str = "") -> None:
        self._finish_probe()
        self._stats.failed += 1
        self.emit(EventType.PROBE_FAILED, run_id=run_id, host=host, error=error, detail=detail)
        self._emit_stats_update()

    def run_complete(self, run_id: int, cidr: str, duration_seconds: float) -> None:
        self._stats.status = "Complete"
        self._stats.queue = 0
        self._stats.in_flight = 0
        self.emit(
            EventType.RUN_COMPLETE,
            run_id=run_id,
            cidr=cidr,
            total=self._stats.total,
            printers=self._stats.printers,
            failed=self._stats.failed,
            duration_seconds=duration_seconds,
        )
        self._emit_stats_update()

    def run_stopped(self, run_id: int, cidr: str) -> None:
        self._stats.status = "Stopped"
        self._stats.queue = 0
        self.emit(EventType.RUN_STOPPED, run_id=run_id, cidr=cidr, probed=self._stats.probed)
        self._emit_stats_update()

    def log(self, message: str, level: LogLevel = LogLevel.INFO, host: str = "") -> None:
        self.emit(EventType.LOG_MESSAGE, message=message, level=level.value, host=host)

    def _finish_probe(self) -> None:
        self._stats.probed += 1
        self._stats.in_flight = max(0, self._stats.in_flight - 1)

    def _emit_stats_update(self) -> None:
        self.emit(EventType.STATS_UPDATED, **self._stats.to_dict())


# =========================================================================
# Console Event Printer (for CLI)
# =========================================================================

class ConsoleEventPrinter:
    """
    Prints discovery events to the console.

    Usage:
        printer = ConsoleEventPrinter(verbose=True, color=True)
        emitter.subscribe(printer.handle_event)
    """

    # ANSI color codes
    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "cyan": "\033[36m",
    }

    def __init__(
        self,
        verbose: bool = False,
        color: bool = True,
        show_timestamps: bool = False,
    ):
        self.verbose = verbose
        self.color = color
        self.show_timestamps = show_timestamps

    def _c(self, text: str, *colors: str) -> str:
        """Apply colors if enabled."""
        if not self.color:
            return text
        codes = "".join(self.COLORS.get(c, "") for c in colors)
        return f"{codes}{text}{self.COLORS['reset']}"

    def _timestamp(self, event: DiscoveryEvent) -> str:
        if not self.show_timestamps:
            return ""
        return f"[{event.timestamp.strftime('%H:%M:%S')}] "

    def handle_event(self, event: DiscoveryEvent) -> None:
        """Handle and print a discovery event."""
        handler = getattr(self, f"_handle_{event.event_type.value}", None)
        if handler:
            handler(event)
        elif self.verbose:
            print(f"{self._timestamp(event)}[{event.event_type.value}] {event.data}")

    def _handle_run_started(self, event: DiscoveryEvent) -> None:
        data = event.data
        print()
        print(self._c("=" * 60, "cyan", "bold"))
        print(self._c("PRINTER DISCOVERY STARTED", "cyan", "bold"))
        print(self._c("=" * 60, "cyan", "bold"))
        print(f"Range: {data['cidr']} ({data['host_count']} hosts)")
        print(f"Concurrency: {data['concurrency']}")
        print()

    def _handle_run_complete(self, event: DiscoveryEvent) -> None:
        data = event.data
        print()
        print(self._c("#" * 60, "green", "bold"))
        print(self._c("DISCOVERY COMPLETE", "green", "bold"))
        print(self._c("#" * 60, "green", "bold"))
        print(f"Hosts probed: {data['total']}")
        print(f"Printers: {self._c(str(data['printers']), 'green')}")
        print(f"Failed: {self._c(str(data['failed']), 'red')}")
        print(f"Duration: {data['duration_seconds']:.1f}s")
        print()

    def _handle_run_stopped(self, event: DiscoveryEvent) -> None:
        print()
        print(self._c(f"Discovery stopped after {event.data['probed']} hosts", "yellow", "bold"))
        print()

    def _handle_probe_started(self, event: DiscoveryEvent) -> None:
        if self.verbose:
            print(f"{self._timestamp(event)}  Probing: {event.host}")

    def _handle_printer_found(self, event: DiscoveryEvent) -> None:
        printer = event.data.get('printer') or {}
        status = self._c("PRINTER", "green", "bold")
        model = printer.get('model') or 'unknown model'
        print(f"{self._timestamp(event)}  {status}: {event.host} - {model}")

    def _handle_not_printer(self, event: DiscoveryEvent) -> None:
        if self.verbose:
            print(f"{self._timestamp(event)}  {self._c('SKIP', 'dim')}: {event.host} (not a printer)")

    def _handle_probe_failed(self, event: DiscoveryEvent) -> None:
        # verbose only
        if not self.verbose:
            return
        error = event.data.get('error', 'Unknown error')
        if len(error) > 60:
            error = error[:57] + "..."
        print(f"{self._timestamp(event)}  {self._c('FAILED', 'red')}: {event.host} - {error}")

    def _handle_log_message(self, event: DiscoveryEvent) -> None:
        level = event.data.get('level', 'info')
        level_colors = {
            'debug': ('dim',),
            'info': (),
            'warning': ('yellow',),
            'error': ('red',),
            'success': ('green',),
        }
        prefix = f"[{level.upper()}] " if self.verbose else ""
        print(f"{self._timestamp(event)}{prefix}{self._c(event.message, *level_colors.get(level, ()))}")

    def _handle_stats_updated(self, event: DiscoveryEvent) -> None:
        """Stats updates are silent in CLI."""
        pass

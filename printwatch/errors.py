"""
printwatch - Error taxonomy.

Every failure the engine can hand back to a caller is one of the
exceptions below. Each carries two renderings:

- user_summary(): one short sentence for status lines and dialogs
- technical_detail(): the verbose form for logs and exports

Propagation rules:
    - per-host discovery failures are collected, never raised out of a run
    - a poll failure is raised directly to the caller
    - identifier and range parse errors fail fast (ValueError subclasses)
"""

from enum import Enum
from typing import Optional


class PrintwatchError(Exception):
    """Base exception for printwatch operations."""

    def user_summary(self) -> str:
        return str(self)

    def technical_detail(self) -> str:
        return str(self)


# =============================================================================
# SNMP transport errors
# =============================================================================

class SnmpError(PrintwatchError):
    """Base class for errors raised by an SNMP client."""

    def __init__(self, address: str, message: str = ""):
        self.address = address
        super().__init__(message or f"SNMP error for {address}")


class SnmpAuthError(SnmpError):
    """Raised when the device rejects the community string."""

    def __init__(self, address: str):
        super().__init__(address, f"SNMP authentication failed for {address}")

    def user_summary(self) -> str:
        return f"SNMP authentication failed for {self.address}."

    def technical_detail(self) -> str:
        return f"SNMP authentication failure (community mismatch) for {self.address}."


class SnmpTimeoutError(SnmpError):
    """Raised when no response arrived within the timeout after all retries."""

    def __init__(self, address: str, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(address, f"SNMP timeout after {timeout_ms}ms for {address}")

    def user_summary(self) -> str:
        return f"SNMP timeout after {self.timeout_ms}ms for {self.address}."

    def technical_detail(self) -> str:
        return (
            f"SNMP request to {self.address} timed out after "
            f"{self.timeout_ms}ms (retries exhausted)."
        )


class SnmpFailureError(SnmpError):
    """Raised for any other transport or protocol fault."""

    def __init__(self, address: str, details: str):
        self.details = details
        super().__init__(address, f"SNMP failure for {address}: {details}")

    def user_summary(self) -> str:
        return f"SNMP request failed for {self.address}."

    def technical_detail(self) -> str:
        return f"SNMP failure for {self.address}: {self.details}"


# =============================================================================
# Device and counter errors
# =============================================================================

class UnsupportedModelError(PrintwatchError):
    """Raised when a device model has no known counter layout."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Unsupported printer model: {model}")

    def user_summary(self) -> str:
        return f"Unsupported printer model: {self.model}."

    def technical_detail(self) -> str:
        return f"Printer model '{self.model}' has no counter mapping."


class MissingCountersError(PrintwatchError):
    """Raised when one or more counter categories could not be resolved."""

    def __init__(self, printer_id: str, missing: str):
        self.printer_id = printer_id
        self.missing = missing
        super().__init__(f"Missing counters for {printer_id}: {missing}")

    def user_summary(self) -> str:
        return f"Missing counters for {self.printer_id}."

    def technical_detail(self) -> str:
        return f"Missing counters for {self.printer_id}: {self.missing}."


class CounterResetError(PrintwatchError):
    """Raised when a counter reading went backwards between snapshots."""

    def __init__(self, printer_id: str, previous: int, current: int):
        self.printer_id = printer_id
        self.previous = previous
        self.current = current
        super().__init__(
            f"Counter reset detected for {printer_id}: {previous} -> {current}"
        )

    def user_summary(self) -> str:
        return f"Counter reset detected for {self.printer_id}."

    def technical_detail(self) -> str:
        return (
            f"Counter reset detected for {self.printer_id}: "
            f"previous {self.previous}, current {self.current}."
        )


class DiscoveryFailureError(PrintwatchError):
    """Aggregate failure of a discovery run, optionally scoped to a range."""

    def __init__(self, cidr: Optional[str], details: str):
        self.cidr = cidr
        self.details = details
        super().__init__(f"Discovery failed: {details}")

    def user_summary(self) -> str:
        if self.cidr:
            return f"Discovery failed for {self.cidr}."
        return "Discovery failed."

    def technical_detail(self) -> str:
        if self.cidr:
            return f"Discovery failed for {self.cidr}: {self.details}"
        return f"Discovery failed: {self.details}"


# =============================================================================
# Storage errors (raised by external persistence, shaped here)
# =============================================================================

class StorageAction(str, Enum):
    """Which side of a persistence round-trip failed."""
    LOAD = "load"
    SAVE = "save"


class StorageError(PrintwatchError):
    """Raised when loading or saving records fails."""

    def __init__(self, action: StorageAction, path: str, details: str):
        self.action = action
        self.path = path
        self.details = details
        super().__init__(f"Storage {action.value} failed for {path}: {details}")

    def user_summary(self) -> str:
        return f"Failed to {self.action.value} data."

    def technical_detail(self) -> str:
        return f"Storage {self.action.value} failed for {self.path}: {self.details}"


# =============================================================================
# Parse errors
# =============================================================================

class OidParseError(PrintwatchError, ValueError):
    """Raised for malformed OID text."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid OID '{text}': {reason}")


class CidrParseError(PrintwatchError, ValueError):
    """Raised for malformed CIDR range text."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(reason)

    def user_summary(self) -> str:
        return f"Invalid range: {self.reason}"

    def technical_detail(self) -> str:
        return f"Invalid CIDR '{self.text}': {self.reason}"

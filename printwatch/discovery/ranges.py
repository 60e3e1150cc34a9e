"""
printwatch - CIDR range enumeration.

Parses "a.b.c.d/prefix" into a bounded, forward-only host sequence.

    >>> hosts = CidrRange.parse("10.0.0.0/30")
    >>> [str(ip) for ip in hosts]
    ['10.0.0.1', '10.0.0.2']
    >>> list(hosts)        # exhausted; parse again to re-iterate
    []

Prefixes up to /30 skip the network and broadcast addresses; /31 and
/32 use every address in the block.
"""

import ipaddress
import logging
import socket
from typing import Iterator, Optional

from ..errors import CidrParseError

log = logging.getLogger("printwatch.discovery")

FALLBACK_DISCOVERY_CIDR = "192.168.129.1/24"


class CidrRange(Iterator[ipaddress.IPv4Address]):
    """
    Iterable IPv4 host range.

    The range is its own iterator: once consumed it stays consumed.

    Attributes:
        network: Network address (host bits cleared)
        prefix: Prefix length, 0-32
        host_count: Number of usable hosts (fixed at parse time)
    """

    def __init__(self, network: ipaddress.IPv4Address, prefix: int, start: int, end: int):
        self.network = network
        self.prefix = prefix
        self._start = start
        self._end = end
        self._next = start

    @classmethod
    def parse(cls, text: str) -> 'CidrRange':
        """
        Parse CIDR text.

        Raises:
            CidrParseError: missing "/", bad address or bad prefix
        """
        value = text.strip()
        addr_text, sep, prefix_text = value.partition('/')
        if not sep:
            raise CidrParseError(text, "CIDR must include a /prefix")

        try:
            address = ipaddress.IPv4Address(addr_text)
        except ValueError:
            raise CidrParseError(text, f"Invalid IPv4 address: {addr_text}") from None

        if not (prefix_text.isascii() and prefix_text.isdigit()):
            raise CidrParseError(text, f"Invalid prefix length: {prefix_text}")
        prefix = int(prefix_text)
        if prefix > 32:
            raise CidrParseError(text, f"Prefix length out of range: {prefix}")

        mask = (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF
        network = int(address) & mask
        broadcast = network | (~mask & 0xFFFFFFFF)

        if prefix <= 30:
            start, end = network + 1, broadcast - 1
        else:
            start, end = network, broadcast

        return cls(ipaddress.IPv4Address(network), prefix, start, end)

    @property
    def host_count(self) -> int:
        if self._end < self._start:
            return 0
        return self._end - self._start + 1

    def hosts(self) -> 'CidrRange':
        """Remaining hosts; shares position with the range itself."""
        return self

    def __iter__(self) -> 'CidrRange':
        return self

    def __next__(self) -> ipaddress.IPv4Address:
        if self._next > self._end:
            raise StopIteration
        current = self._next
        self._next += 1
        return ipaddress.IPv4Address(current)

    def __str__(self) -> str:
        return f"{self.network}/{self.prefix}"

    def __repr__(self) -> str:
        return f"CidrRange('{self}', host_count={self.host_count})"


def default_discovery_cidr() -> Optional[str]:
    """
    Guess the local /24 from the outbound interface address.

    The UDP connect() only selects a route; no packet is sent.
    Loopback and link-local (169.254/16) addresses are ignored.

    Returns:
        CIDR text such as "192.168.1.0/24", or None
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("8.8.8.8", 80))
            local_ip = ipaddress.IPv4Address(s.getsockname()[0])
    except (OSError, ValueError) as e:
        log.debug(f"Could not detect local network: {e}")
        return None

    if local_ip.is_loopback or local_ip.is_link_local or local_ip.is_unspecified:
        return None

    network = ipaddress.ip_network(f"{local_ip}/24", strict=False)
    log.debug(f"Detected local network: {network}")
    return str(network)

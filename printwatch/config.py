"""
printwatch - Configuration.

Explicit configuration values passed into every client and engine
constructor. Nothing here is global; load once and hand it down.

YAML layout (all keys optional):

    snmp:
      community: public
      timeout: 2.0
      retries: 1
      port: 161
    discovery:
      concurrency: 24
      cidr: 192.168.1.0/24
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .errors import StorageAction, StorageError

log = logging.getLogger("printwatch.config")

DEFAULT_COMMUNITY = "public"
DEFAULT_TIMEOUT = 2.0
DEFAULT_RETRIES = 1
DEFAULT_PORT = 161
DISCOVERY_CONCURRENCY = 24


@dataclass
class SnmpConfig:
    """SNMP client defaults."""
    community: str = DEFAULT_COMMUNITY
    timeout: float = DEFAULT_TIMEOUT      # Seconds per attempt
    retries: int = DEFAULT_RETRIES        # Extra attempts after the first
    port: int = DEFAULT_PORT

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout * 1000)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SnmpConfig':
        return cls(
            community=data.get('community', DEFAULT_COMMUNITY),
            timeout=float(data.get('timeout', DEFAULT_TIMEOUT)),
            retries=int(data.get('retries', DEFAULT_RETRIES)),
            port=int(data.get('port', DEFAULT_PORT)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'community': self.community,
            'timeout': self.timeout,
            'retries': self.retries,
            'port': self.port,
        }


@dataclass
class DiscoveryConfig:
    """Discovery run defaults."""
    concurrency: int = DISCOVERY_CONCURRENCY
    cidr: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DiscoveryConfig':
        return cls(
            concurrency=int(data.get('concurrency', DISCOVERY_CONCURRENCY)),
            cidr=data.get('cidr'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'concurrency': self.concurrency, 'cidr': self.cidr}


@dataclass
class PrintwatchConfig:
    """Container for all printwatch configuration."""
    snmp: SnmpConfig = field(default_factory=SnmpConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'PrintwatchConfig':
        data = data or {}
        return cls(
            snmp=SnmpConfig.from_dict(data.get('snmp') or {}),
            discovery=DiscoveryConfig.from_dict(data.get('discovery') or {}),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'PrintwatchConfig':
        """Create PrintwatchConfig from YAML file."""
        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(StorageAction.LOAD, str(yaml_path), str(e)) from e

        if data is not None and not isinstance(data, dict):
            raise StorageError(
                StorageAction.LOAD, str(yaml_path), "top level must be a mapping"
            )

        log.debug(f"Loaded configuration from {yaml_path}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {'snmp': self.snmp.to_dict(), 'discovery': self.discovery.to_dict()}

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        try:
            with open(yaml_path, 'w') as f:
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        except OSError as e:
            raise StorageError(StorageAction.SAVE, str(yaml_path), str(e)) from e

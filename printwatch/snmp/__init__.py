"""
printwatch - SNMP layer.

Architecture:
    snmp/
    ├── oid.py       # Numeric OID type
    ├── values.py    # Tagged SnmpValue / SnmpVarBind
    ├── messages.py  # SnmpAddress, requests, responses
    ├── parsers.py   # pysnmp -> SnmpValue conversion, text helpers
    ├── client.py    # SnmpClient interface + pysnmp SnmpV2cClient
    └── mock.py      # Queue-backed MockSnmpClient
"""

from .oid import Oid
from .values import SnmpValue, SnmpVarBind, ValueKind
from .messages import (
    DEFAULT_SNMP_PORT,
    SnmpAddress,
    SnmpRequest,
    SnmpResponse,
    SnmpWalkRequest,
)
from .client import (
    GET_BATCH_SIZE,
    SnmpClient,
    SnmpV2cClient,
    snmp_get,
    snmp_walk,
)
from .mock import MockSnmpClient

__all__ = [
    'Oid',
    'SnmpValue',
    'SnmpVarBind',
    'ValueKind',
    'DEFAULT_SNMP_PORT',
    'SnmpAddress',
    'SnmpRequest',
    'SnmpResponse',
    'SnmpWalkRequest',
    'GET_BATCH_SIZE',
    'SnmpClient',
    'SnmpV2cClient',
    'snmp_get',
    'snmp_walk',
    'MockSnmpClient',
]

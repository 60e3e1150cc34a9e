"""Shared fixtures and varbind builders."""

from typing import List, Union

import pytest

from printwatch.config import SnmpConfig
from printwatch.snmp.messages import SnmpAddress
from printwatch.snmp.mock import MockSnmpClient
from printwatch.snmp.oid import Oid
from printwatch.snmp.values import SnmpValue, SnmpVarBind, ValueKind


def vb(oid: Union[str, Oid], value: SnmpValue) -> SnmpVarBind:
    return SnmpVarBind(Oid.coerce(oid), value)


def counter(oid: str, value: int) -> SnmpVarBind:
    return vb(oid, SnmpValue.counter32(value))


def text(oid: str, value: str) -> SnmpVarBind:
    return vb(oid, SnmpValue.octet_string(value))


def sentinel(oid: str, kind: ValueKind = ValueKind.NO_SUCH_OBJECT) -> SnmpVarBind:
    return vb(oid, SnmpValue(kind))


def oids(*texts: str) -> List[Oid]:
    return [Oid.parse(t) for t in texts]


@pytest.fixture
def snmp_config() -> SnmpConfig:
    return SnmpConfig(community="public", timeout=0.5, retries=1)


@pytest.fixture
def address() -> SnmpAddress:
    return SnmpAddress("10.0.0.5")


@pytest.fixture
def mock_client(snmp_config) -> MockSnmpClient:
    return MockSnmpClient(snmp_config)

"""Root conftest: shared fixtures for all tests."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from snmpwalk_server.core.config import RegistryConfig, Settings


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the caller's environment and .env file."""
    return Settings(
        _env_file=None,
        listen_addr="0.0.0.0",
        listen_port=8085,
        registry=RegistryConfig(),
    )


@pytest.fixture
def pysnmp_mocks():
    """
    Patch the pysnmp session pieces used by SnmpWalkEngine.

    ``bulk`` is the GETBULK coroutine: set its side_effect to a list of
    (error_indication, error_status, error_index, var_binds) rounds.
    """
    with patch("snmpwalk_server.snmp.engine.SnmpEngine") as engine_cls, \
            patch("snmpwalk_server.snmp.engine.UdpTransportTarget") as udp_cls, \
            patch("snmpwalk_server.snmp.engine.Udp6TransportTarget") as udp6_cls, \
            patch("snmpwalk_server.snmp.engine.bulk_cmd", new_callable=AsyncMock) as bulk:
        udp_cls.create = AsyncMock(return_value=MagicMock(name="udp-transport"))
        udp6_cls.create = AsyncMock(return_value=MagicMock(name="udp6-transport"))
        yield SimpleNamespace(
            engine_cls=engine_cls,
            engine=engine_cls.return_value,
            udp=udp_cls,
            udp6=udp6_cls,
            bulk=bulk,
        )

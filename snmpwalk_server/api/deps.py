"""
Shared FastAPI dependencies.

Settings and the walk engine live on ``app.state`` (set by create_app), so
tests can replace either through ``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Request

from snmpwalk_server.core.config import Settings
from snmpwalk_server.snmp.engine import SnmpWalkEngine


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_walk_engine(request: Request) -> SnmpWalkEngine:
    return request.app.state.walk_engine

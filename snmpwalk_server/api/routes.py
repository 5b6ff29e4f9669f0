"""
API router configuration.

Aggregates all endpoint routers.
"""
from __future__ import annotations

from fastapi import APIRouter

from snmpwalk_server.api.endpoints import health, walk

api_router = APIRouter()

api_router.include_router(
    walk.router,
    prefix="",
    tags=["Walk"],
)

# Liveness lives outside the API prefix
health_router = APIRouter()

health_router.include_router(
    health.router,
    prefix="",
    tags=["Health"],
)

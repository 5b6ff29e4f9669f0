"""
Liveness endpoint, polled by the service registry health check.
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from snmpwalk_server.api.endpoints import ANY_METHODS

router = APIRouter()


@router.api_route("/online_check", methods=ANY_METHODS, response_class=PlainTextResponse)
async def online_check() -> str:
    """Always ``online`` whatever the method; never touches the walk engine."""
    return "online"

"""
Walk API endpoint.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import ValidationError

from snmpwalk_server.api.deps import get_app_settings, get_walk_engine
from snmpwalk_server.api.endpoints import ANY_METHODS
from snmpwalk_server.core.config import Settings
from snmpwalk_server.schemas.walk import WalkRequest
from snmpwalk_server.services.walk_service import run_walk
from snmpwalk_server.snmp.engine import SnmpWalkEngine
from snmpwalk_server.snmp.envelope import encode_result

logger = logging.getLogger(__name__)

router = APIRouter()

JSON_MEDIA_TYPE = "application/json; charset=utf-8"


@router.api_route("/snmpwalk", methods=ANY_METHODS)
async def snmpwalk(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    engine: SnmpWalkEngine = Depends(get_walk_engine),
) -> Response:
    """
    Walk an OID subtree on one agent.

    Body: ``{"ip": ..., "community": ..., "targetOid": ...}``.
    Always answers 200 with the envelope once the body parses; an
    unparseable body gets an empty response (or 400 when
    reject_malformed_body is set).
    """
    body = await request.body()
    try:
        walk_request = WalkRequest.model_validate_json(body)
    except ValidationError as e:
        logger.warning(
            "Malformed walk request from %s: %s",
            request.client.host if request.client else "unknown",
            e.errors(include_url=False, include_input=False),
        )
        if settings.reject_malformed_body:
            raise HTTPException(status_code=400, detail="Malformed walk request body")
        return Response()

    result = await run_walk(engine, walk_request)
    return Response(content=encode_result(result), media_type=JSON_MEDIA_TYPE)

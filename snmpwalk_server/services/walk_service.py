"""
Walk Service.

Runs one walk for an HTTP request and collapses every engine failure into
the opaque ``{"code": -1}`` envelope. The failure kind is only logged.
"""
from __future__ import annotations

import logging
import time

from snmpwalk_server.schemas.walk import WalkRequest, WalkResult
from snmpwalk_server.snmp import envelope
from snmpwalk_server.snmp.engine import SnmpError, SnmpTarget, SnmpWalkEngine

logger = logging.getLogger(__name__)


async def run_walk(engine: SnmpWalkEngine, request: WalkRequest) -> WalkResult:
    """Walk request.target_oid on request.ip and build the envelope."""
    target = SnmpTarget(ip=request.ip, community=request.community)
    start = time.monotonic()

    try:
        outcome = await engine.walk(target, request.target_oid)
    except SnmpError as e:
        logger.warning(
            "Walk failed (%s) for %s oid=%s after %.2fs: %s",
            e.kind.value, request.ip, request.target_oid,
            time.monotonic() - start, e,
        )
        return envelope.failure()

    logger.info(
        "Walk %s oid=%s: %d bindings in %.2fs%s",
        request.ip, outcome.root_oid, len(outcome.bindings),
        time.monotonic() - start,
        f" (partial, {outcome.error_status})" if outcome.partial else "",
    )
    return envelope.success(outcome)

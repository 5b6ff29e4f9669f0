"""
Result envelope codec.

Shapes a WalkOutcome into the wire envelope and serializes it to compact
UTF-8 JSON. Write-only: nothing in this service decodes envelopes.
"""
from __future__ import annotations

from snmpwalk_server.schemas.walk import FAILURE_CODE, SUCCESS_CODE, WalkResult
from snmpwalk_server.snmp.engine import WalkOutcome


def success(outcome: WalkOutcome) -> WalkResult:
    """Envelope for a completed walk, including best-effort partial walks."""
    return WalkResult(code=SUCCESS_CODE, data=dict(outcome.bindings))


def failure() -> WalkResult:
    """Envelope for any hard failure. Carries no detail by contract."""
    return WalkResult(code=FAILURE_CODE)


def encode_result(result: WalkResult) -> bytes:
    """
    Serialize to ``{"code":0,"data":{...}}`` or ``{"code":-1}``.

    ``data`` is omitted entirely when absent, never written as null.
    """
    return result.model_dump_json(exclude_none=True).encode("utf-8")

"""Unit tests for SnmpWalkEngine with the pysnmp session patched out."""
from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pyasn1.error import PyAsn1Error
from pysnmp.error import PySnmpError
from pysnmp.proto import errind, rfc1905
from pysnmp.proto.rfc1902 import Integer32, ObjectName, OctetString

from snmpwalk_server.core.enums import WalkFailureKind
from snmpwalk_server.snmp.engine import (
    MAX_REPETITIONS,
    NON_REPEATERS,
    SnmpOidError,
    SnmpProtocolError,
    SnmpSessionError,
    SnmpTarget,
    SnmpTimeoutError,
    SnmpWalkEngine,
    parse_oid,
    relative_key,
)

SYSTEM = "1.3.6.1.2.1.1"


def _vb(oid: str, value):
    return (ObjectName(oid), value)


def _ok(*var_binds):
    """One successful GETBULK round."""
    return (None, 0, 0, list(var_binds))


def _error_status(name: str, index: int):
    status = MagicMock()
    status.__bool__.return_value = True
    status.prettyPrint.return_value = name
    return (None, status, index, [])


@pytest.fixture
def target():
    return SnmpTarget(ip="10.0.0.5", community="public")


# =====================================================================
# OID helpers
# =====================================================================


class TestParseOid:

    def test_plain_dotted_oid(self):
        assert str(parse_oid(SYSTEM)) == SYSTEM

    def test_surrounding_dots_and_spaces_ignored(self):
        assert str(parse_oid(" .1.3.6.1.2.1.1. ")) == SYSTEM

    @pytest.mark.parametrize("bad", [
        "", "   ", ".", "1.3.6.abc", "1..3", "1.3.-6", "iso.3.6",
        "1", "3.1", "1.40.1",
    ])
    def test_malformed_oid_raises(self, bad):
        with pytest.raises(SnmpOidError) as exc_info:
            parse_oid(bad)
        assert exc_info.value.kind is WalkFailureKind.PARSE

    def test_joint_iso_itu_arc_allows_large_second_arc(self):
        assert str(parse_oid("2.999.1")) == "2.999.1"


def test_relative_key_strips_root_and_dot():
    root = parse_oid(SYSTEM)
    assert relative_key(root, ObjectName("1.3.6.1.2.1.1.5.0")) == "5.0"
    assert relative_key(root, ObjectName("1.3.6.1.2.1.1.9.1.2.10")) == "9.1.2.10"


# =====================================================================
# Walk
# =====================================================================


@pytest.mark.asyncio
async def test_walk_collects_subtree_until_out_of_scope(pysnmp_mocks, target):
    """Rounds continue until the agent answers past the subtree."""
    pysnmp_mocks.bulk.side_effect = [
        _ok(
            _vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host")),
            _vb("1.3.6.1.2.1.1.3.0", Integer32(4242)),
        ),
        _ok(
            _vb("1.3.6.1.2.1.1.5.0", OctetString("myhost")),
            _vb("1.3.6.1.2.1.2.1.0", Integer32(3)),
        ),
    ]

    outcome = await SnmpWalkEngine().walk(target, SYSTEM)

    assert outcome.bindings == {"1.0": "Linux host", "3.0": "4242", "5.0": "myhost"}
    assert list(outcome.bindings) == ["1.0", "3.0", "5.0"]
    assert not outcome.partial
    assert pysnmp_mocks.bulk.await_count == 2


@pytest.mark.asyncio
async def test_walk_uses_v2c_getbulk_parameters(pysnmp_mocks, target):
    """1 s timeout, 1 retry, port 161, non-repeaters 0, max-repetitions 10."""
    pysnmp_mocks.bulk.side_effect = [_ok()]

    await SnmpWalkEngine().walk(target, SYSTEM)

    pysnmp_mocks.udp.create.assert_awaited_once_with(
        ("10.0.0.5", 161), timeout=1.0, retries=1,
    )
    args = pysnmp_mocks.bulk.await_args.args
    kwargs = pysnmp_mocks.bulk.await_args.kwargs
    assert args[0] is pysnmp_mocks.engine
    assert args[1].message_processing_model == 1
    assert args[4] == NON_REPEATERS == 0
    assert args[5] == MAX_REPETITIONS == 10
    assert kwargs["lookupMib"] is False


@pytest.mark.asyncio
async def test_walk_stops_at_end_of_mib_view(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [
        _ok(
            _vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host")),
            _vb("1.3.6.1.2.1.1.2.0", rfc1905.endOfMibView),
        ),
    ]

    outcome = await SnmpWalkEngine().walk(target, SYSTEM)

    assert outcome.bindings == {"1.0": "Linux host"}
    assert pysnmp_mocks.bulk.await_count == 1


@pytest.mark.asyncio
async def test_walk_empty_subtree_returns_no_bindings(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [_ok(_vb("1.3.6.1.2.1.2.1.0", Integer32(3)))]

    outcome = await SnmpWalkEngine().walk(target, SYSTEM)

    assert outcome.bindings == {}


@pytest.mark.asyncio
async def test_walk_stops_when_oid_does_not_increase(pysnmp_mocks, target):
    """A misbehaving agent repeating the same OID must not loop forever."""
    looping = _ok(_vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host")))
    pysnmp_mocks.bulk.side_effect = [looping, looping, looping]

    outcome = await SnmpWalkEngine().walk(target, SYSTEM)

    assert outcome.bindings == {"1.0": "Linux host"}
    assert pysnmp_mocks.bulk.await_count == 2


@pytest.mark.asyncio
async def test_walk_accepts_leading_dot_root(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [
        _ok(
            _vb("1.3.6.1.2.1.1.5.0", OctetString("myhost")),
            _vb("1.3.6.1.2.1.2.1.0", Integer32(3)),
        ),
    ]

    outcome = await SnmpWalkEngine().walk(target, ".1.3.6.1.2.1.1")

    assert outcome.bindings == {"5.0": "myhost"}
    assert outcome.root_oid == SYSTEM


@pytest.mark.asyncio
async def test_walk_ipv6_target_uses_udp6_transport(pysnmp_mocks):
    pysnmp_mocks.bulk.side_effect = [_ok()]

    await SnmpWalkEngine().walk(SnmpTarget(ip="fe80::1", community="public"), SYSTEM)

    pysnmp_mocks.udp6.create.assert_awaited_once()
    pysnmp_mocks.udp.create.assert_not_awaited()


# ── Error status: best effort vs strict ─────────────────────────────


@pytest.mark.asyncio
async def test_error_status_returns_partial_bindings(pysnmp_mocks, target):
    """Non-zero error status keeps what was already collected."""
    pysnmp_mocks.bulk.side_effect = [
        _ok(_vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host"))),
        _error_status("genErr", 1),
    ]

    outcome = await SnmpWalkEngine().walk(target, SYSTEM)

    assert outcome.bindings == {"1.0": "Linux host"}
    assert outcome.partial
    assert outcome.error_status == "genErr"
    assert outcome.error_index == 1
    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


@pytest.mark.asyncio
async def test_error_status_raises_in_strict_mode(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [
        _ok(_vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host"))),
        _error_status("genErr", 1),
    ]

    with pytest.raises(SnmpProtocolError) as exc_info:
        await SnmpWalkEngine(strict=True).walk(target, SYSTEM)

    assert exc_info.value.kind is WalkFailureKind.PROTOCOL
    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


# ── Hard failures ───────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_malformed_oid_fails_without_network(pysnmp_mocks, target):
    with pytest.raises(SnmpOidError):
        await SnmpWalkEngine().walk(target, "1.3.6.abc")

    pysnmp_mocks.engine_cls.assert_not_called()
    pysnmp_mocks.udp.create.assert_not_awaited()
    pysnmp_mocks.bulk.assert_not_awaited()


@pytest.mark.asyncio
async def test_timeout_raises_timeout_error(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [(errind.RequestTimedOut(), 0, 0, [])]

    with pytest.raises(SnmpTimeoutError) as exc_info:
        await SnmpWalkEngine().walk(target, SYSTEM)

    assert exc_info.value.kind is WalkFailureKind.TIMEOUT
    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


@pytest.mark.asyncio
async def test_timeout_mid_walk_discards_earlier_rounds(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [
        _ok(_vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host"))),
        (errind.RequestTimedOut(), 0, 0, []),
    ]

    with pytest.raises(SnmpTimeoutError):
        await SnmpWalkEngine().walk(target, SYSTEM)


@pytest.mark.asyncio
async def test_other_error_indication_raises_session_error(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = [("Unknown SNMP security name encountered", 0, 0, [])]

    with pytest.raises(SnmpSessionError) as exc_info:
        await SnmpWalkEngine().walk(target, SYSTEM)

    assert exc_info.value.kind is WalkFailureKind.SESSION


@pytest.mark.asyncio
async def test_request_encoding_failure_raises_oid_error(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = PyAsn1Error("Malformed Object ID")

    with pytest.raises(SnmpOidError):
        await SnmpWalkEngine().walk(target, SYSTEM)

    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


@pytest.mark.asyncio
async def test_request_serialization_failure_raises_session_error(pysnmp_mocks, target):
    pysnmp_mocks.bulk.side_effect = PySnmpError("SerializationError")

    with pytest.raises(SnmpSessionError):
        await SnmpWalkEngine().walk(target, SYSTEM)

    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


@pytest.mark.asyncio
async def test_transport_open_failure_raises_session_error(pysnmp_mocks, target):
    pysnmp_mocks.udp.create.side_effect = PySnmpError("Bad IPv4/UDP transport address")

    with pytest.raises(SnmpSessionError):
        await SnmpWalkEngine().walk(target, SYSTEM)

    pysnmp_mocks.bulk.assert_not_awaited()
    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


@pytest.mark.asyncio
async def test_empty_address_raises_session_error(pysnmp_mocks):
    with pytest.raises(SnmpSessionError):
        await SnmpWalkEngine().walk(SnmpTarget(ip="", community="public"), SYSTEM)

    pysnmp_mocks.udp.create.assert_not_awaited()
    pysnmp_mocks.engine.close_dispatcher.assert_called_once()


@pytest.mark.asyncio
async def test_same_walk_twice_is_idempotent(pysnmp_mocks, target):
    rounds = [
        _ok(
            _vb("1.3.6.1.2.1.1.1.0", OctetString("Linux host")),
            _vb("1.3.6.1.2.1.1.5.0", OctetString("myhost")),
            _vb("1.3.6.1.2.1.2.1.0", Integer32(3)),
        ),
    ]
    pysnmp_mocks.bulk.side_effect = rounds * 2
    engine = SnmpWalkEngine()

    first = await engine.walk(target, SYSTEM)
    second = await engine.walk(target, SYSTEM)

    assert first.bindings == second.bindings
    assert pysnmp_mocks.engine_cls.call_count == 2
    assert pysnmp_mocks.engine.close_dispatcher.call_count == 2

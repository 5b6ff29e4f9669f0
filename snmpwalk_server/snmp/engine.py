"""
SNMP Walk Engine: pysnmp asyncio wrapper.

One operation:
- walk(): traverse a whole OID subtree with repeated GETBULK rounds
  (non-repeaters=0, max-repetitions=10) and return the bindings keyed by
  their OID suffix relative to the root.

Each walk owns its own pysnmp SnmpEngine (the "session") and closes its
dispatcher on every exit path. Failures are raised as a tagged SnmpError
hierarchy; collapsing them into the wire sentinel is the caller's job.
"""
from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Any

from pyasn1.error import PyAsn1Error
from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    Udp6TransportTarget,
    UdpTransportTarget,
    bulk_cmd,
)
from pysnmp.proto import errind
from pysnmp.proto.rfc1902 import ObjectName

from snmpwalk_server.core.enums import WalkFailureKind

logger = logging.getLogger(__name__)

SNMP_PORT = 161
NON_REPEATERS = 0
MAX_REPETITIONS = 10

# Values that mark the end of a subtree rather than a real instance
_END_OF_WALK_TYPES = ("NoSuchObject", "NoSuchInstance", "EndOfMibView")


class SnmpError(Exception):
    """Base SNMP error."""

    kind = WalkFailureKind.PROTOCOL


class SnmpOidError(SnmpError):
    """Root OID is not a valid dotted-decimal OID."""

    kind = WalkFailureKind.PARSE


class SnmpSessionError(SnmpError):
    """Session could not be opened or the exchange failed."""

    kind = WalkFailureKind.SESSION


class SnmpTimeoutError(SnmpSessionError):
    """SNMP request timed out after all retries."""

    kind = WalkFailureKind.TIMEOUT


class SnmpProtocolError(SnmpError):
    """Agent answered with a non-zero error status (strict mode only)."""

    kind = WalkFailureKind.PROTOCOL


@dataclass(frozen=True)
class SnmpTarget:
    """Connection parameters for a single SNMP v2c target."""

    ip: str
    community: str
    port: int = SNMP_PORT
    timeout: float = 1.0
    retries: int = 1


@dataclass
class WalkOutcome:
    """Bindings returned by one walk, plus any agent error status."""

    root_oid: str
    bindings: dict[str, str] = field(default_factory=dict)
    error_status: str | None = None
    error_index: int = 0

    @property
    def partial(self) -> bool:
        return self.error_status is not None


def parse_oid(oid: str) -> ObjectName:
    """
    Parse a dotted-decimal OID string.

    Surrounding whitespace and dots are ignored (".1.3.6.1" is accepted).

    Raises:
        SnmpOidError: if the string is empty, has a non-numeric arc, or is
            not encodable (fewer than two arcs, first arc above 2, second
            arc 40 or more under arcs 0 and 1).
    """
    cleaned = (oid or "").strip().strip(".")
    if not cleaned:
        raise SnmpOidError(f"Empty OID: {oid!r}")
    arcs = cleaned.split(".")
    if not all(arc.isdigit() for arc in arcs):
        raise SnmpOidError(f"Malformed OID: {oid!r}")
    if len(arcs) < 2:
        raise SnmpOidError(f"OID needs at least two arcs: {oid!r}")
    first, second = int(arcs[0]), int(arcs[1])
    if first > 2 or (first < 2 and second >= 40):
        raise SnmpOidError(f"OID not encodable: {oid!r}")
    try:
        return ObjectName(cleaned)
    except PyAsn1Error as e:
        raise SnmpOidError(f"Malformed OID: {oid!r}: {e}") from e


def relative_key(root: ObjectName, oid: ObjectName) -> str:
    """Return the OID suffix below root, without the separating dot."""
    return str(oid)[len(str(root)) + 1:]


def _in_subtree(root: ObjectName, oid: ObjectName) -> bool:
    return len(oid) > len(root) and tuple(oid[: len(root)]) == tuple(root)


class SnmpWalkEngine:
    """
    GETBULK subtree walker.

    Args:
        max_repetitions: bindings requested per GETBULK round.
        strict: raise SnmpProtocolError on a non-zero error status instead
            of returning the bindings collected so far.
    """

    def __init__(
        self,
        max_repetitions: int = MAX_REPETITIONS,
        strict: bool = False,
    ) -> None:
        self._max_repetitions = max_repetitions
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    async def _make_transport(self, target: SnmpTarget) -> Any:
        """Create the UDP transport; IPv6 literals get the UDP6 transport."""
        if not target.ip:
            raise SnmpSessionError("Empty target address")

        try:
            is_v6 = ipaddress.ip_address(target.ip).version == 6
        except ValueError:
            is_v6 = False  # hostname

        transport_cls = Udp6TransportTarget if is_v6 else UdpTransportTarget
        try:
            return await transport_cls.create(
                (target.ip, target.port),
                timeout=target.timeout,
                retries=target.retries,
            )
        except (PySnmpError, OSError) as e:
            raise SnmpSessionError(
                f"Cannot open session to {target.ip}:{target.port}: {e}"
            ) from e

    async def walk(self, target: SnmpTarget, root_oid: str) -> WalkOutcome:
        """
        Full SNMP walk of the subtree rooted at root_oid.

        Returns:
            WalkOutcome with {relative_oid: value_str} bindings in agent order.

        Raises:
            SnmpOidError: root_oid is malformed (no packet is sent).
            SnmpTimeoutError: a GETBULK round timed out after retries.
            SnmpSessionError: transport could not be opened, or other
                error indication from pysnmp.
            SnmpProtocolError: non-zero error status in strict mode.
        """
        root = parse_oid(root_oid)
        outcome = WalkOutcome(root_oid=str(root))

        engine = SnmpEngine()
        try:
            transport = await self._make_transport(target)
            await self._walk_impl(engine, transport, target, root, outcome)
        finally:
            engine.close_dispatcher()

        logger.debug(
            "WALK %s %s: %d bindings", target.ip, root, len(outcome.bindings),
        )
        return outcome

    async def _walk_impl(
        self,
        engine: Any,
        transport: Any,
        target: SnmpTarget,
        root: ObjectName,
        outcome: WalkOutcome,
    ) -> None:
        """Issue GETBULK rounds until the subtree is exhausted."""
        community = CommunityData(target.community, mpModel=1)
        context = ContextData()
        current = root

        while True:
            try:
                error_indication, error_status, error_index, var_binds = (
                    await bulk_cmd(
                        engine,
                        community,
                        transport,
                        context,
                        NON_REPEATERS,
                        self._max_repetitions,
                        ObjectType(ObjectIdentity(current)),
                        lookupMib=False,
                    )
                )
            except PyAsn1Error as e:
                raise SnmpOidError(
                    f"SNMP WALK cannot encode request: {target.ip} root={root}: {e}"
                ) from e
            except PySnmpError as e:
                raise SnmpSessionError(
                    f"SNMP WALK request failed: {target.ip} root={root}: {e}"
                ) from e

            if error_indication:
                if isinstance(error_indication, errind.RequestTimedOut):
                    raise SnmpTimeoutError(
                        f"SNMP WALK timeout: {target.ip} root={root}"
                    )
                raise SnmpSessionError(
                    f"SNMP WALK error: {target.ip} root={root}: {error_indication}"
                )

            if error_status:
                status = error_status.prettyPrint()
                index = int(error_index or 0)
                if self._strict:
                    raise SnmpProtocolError(
                        f"SNMP WALK error status: {status} at {index}"
                    )
                logger.warning(
                    "WALK %s %s: error_status=%s error_index=%s, "
                    "returning %d bindings collected so far",
                    target.ip, root, status, index, len(outcome.bindings),
                )
                outcome.error_status = status
                outcome.error_index = index
                return

            if not var_binds:
                return

            for oid, val in var_binds:
                oid = ObjectName(oid)
                if not _in_subtree(root, oid):
                    return
                if val.__class__.__name__ in _END_OF_WALK_TYPES:
                    return
                # Agents that loop on the same OID would never terminate
                if tuple(oid) <= tuple(current):
                    logger.warning(
                        "WALK %s %s: OID not increasing at %s", target.ip, root, oid,
                    )
                    return

                outcome.bindings[relative_key(root, oid)] = val.prettyPrint()
                current = oid

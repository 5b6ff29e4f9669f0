"""
Enumeration definitions for the application.

All enums are defined here to maintain consistency and type safety.
"""
from enum import Enum


class WalkFailureKind(str, Enum):
    """
    Why a walk failed.

    Only used for logging and tests; every kind collapses to the same
    ``{"code": -1}`` envelope on the wire.
    """

    PARSE = "parse"
    SESSION = "session"
    TIMEOUT = "timeout"
    PROTOCOL = "protocol"


class RegistrationState(str, Enum):
    """
    Lifecycle of the one-shot service registration.

    UNREGISTERED → REGISTERING → REGISTERED, or → FAILED (terminal, no retry).
    """

    UNREGISTERED = "unregistered"
    REGISTERING = "registering"
    REGISTERED = "registered"
    FAILED = "failed"

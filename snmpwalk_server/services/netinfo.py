"""
Local address detection.

Picks a default advertised address for the service registry when none is
configured: the last non-loopback IPv4 address found on any interface.
"""
from __future__ import annotations

import ipaddress
import logging
import socket

import psutil

logger = logging.getLogger(__name__)

FALLBACK_ADDRESS = "127.0.0.1"


def intranet_ipv4_addresses() -> list[str]:
    """All non-loopback IPv4 addresses, in interface enumeration order."""
    addresses: list[str] = []
    for nic, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.IPv4Address(addr.address)
            except ValueError:
                continue
            if ip.is_loopback:
                continue
            addresses.append(str(ip))
    return addresses


def default_service_address() -> str:
    """Last detected intranet IPv4 address, or 127.0.0.1 if there is none."""
    addresses = intranet_ipv4_addresses()
    if not addresses:
        logger.warning(
            "No non-loopback IPv4 address found, advertising %s", FALLBACK_ADDRESS,
        )
        return FALLBACK_ADDRESS
    return addresses[-1]

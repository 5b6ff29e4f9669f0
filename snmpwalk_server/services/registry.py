"""
Service Registry Adapter.

Registers this instance into Consul once at startup, with an HTTP health
check on the liveness route. Fire-and-forget: any failure is logged, the
state becomes FAILED and the server keeps serving. There is no retry and no
re-registration.
"""
from __future__ import annotations

import asyncio
import logging

import httpx
import psutil
from pydantic import ValidationError

from snmpwalk_server.core.config import Settings
from snmpwalk_server.core.enums import RegistrationState
from snmpwalk_server.schemas.registry import RegistrationDescriptor
from snmpwalk_server.services.netinfo import default_service_address

logger = logging.getLogger(__name__)

LIVENESS_PATH = "/online_check"
REGISTER_PATH = "/v1/agent/service/register"


def build_descriptor(settings: Settings) -> RegistrationDescriptor:
    """Build the registration descriptor from process configuration."""
    reg = settings.registry
    address = reg.service_addr or default_service_address()
    return RegistrationDescriptor(
        id=f"{reg.service_name}-{address}",
        name=reg.service_name,
        address=address,
        port=settings.listen_port,
        health_check_url=f"http://{address}:{settings.listen_port}{LIVENESS_PATH}",
        health_timeout=reg.check_timeout,
        health_interval=reg.check_interval,
        deregister_after=reg.deregister_after,
    )


class ConsulRegistrar:
    """
    Client for the Consul agent registration API.

    URL format: http://{server_addr}/v1/agent/service/register
    """

    def __init__(
        self,
        server_addr: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            server_addr: Consul agent host:port, scheme optional.
            timeout: HTTP timeout for the registration call.
            transport: httpx transport override (tests).
        """
        if "://" not in server_addr:
            server_addr = f"http://{server_addr}"
        self.server = server_addr.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.state = RegistrationState.UNREGISTERED

    async def register(self, descriptor: RegistrationDescriptor) -> RegistrationState:
        """
        Submit the descriptor once.

        Returns:
            REGISTERED on a 2xx answer, FAILED otherwise. Never raises for
            client construction, network or HTTP errors.
        """
        if self.state is not RegistrationState.UNREGISTERED:
            logger.warning("Registration already attempted (state=%s)", self.state.value)
            return self.state

        self.state = RegistrationState.REGISTERING
        logger.info(
            "Registering %s into %s (advertised %s:%d)",
            descriptor.id, self.server, descriptor.address, descriptor.port,
        )

        try:
            async with httpx.AsyncClient(
                base_url=self.server,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.put(REGISTER_PATH, json=descriptor.to_consul())
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.state = RegistrationState.FAILED
            logger.error("Service registration failed: %s", e)
            return self.state

        self.state = RegistrationState.REGISTERED
        logger.info("Service %s registered", descriptor.id)
        return self.state


async def register_service(settings: Settings) -> RegistrationState:
    """Build the descriptor and register it once."""
    registrar = ConsulRegistrar(
        settings.registry.server_addr,
        timeout=settings.registry.request_timeout,
    )
    try:
        descriptor = build_descriptor(settings)
    except (psutil.Error, OSError, ValidationError) as e:
        registrar.state = RegistrationState.FAILED
        logger.error("Cannot build registration descriptor: %s", e)
        return registrar.state
    return await registrar.register(descriptor)


def start_registration(settings: Settings) -> asyncio.Task[RegistrationState]:
    """Launch registration as a detached background task."""
    return asyncio.create_task(register_service(settings), name="consul-registration")

"""
Pydantic schema for the Consul registration descriptor.
"""
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def format_duration(value: timedelta) -> str:
    """Render a timedelta as a Consul duration string, e.g. ``30s``."""
    seconds = value.total_seconds()
    if seconds.is_integer():
        return f"{int(seconds)}s"
    return f"{int(seconds * 1000)}ms"


class RegistrationDescriptor(BaseModel):
    """One service instance as submitted to the registry."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Instance id: {name}-{address}")
    name: str = Field(..., description="Service name")
    address: str = Field(..., description="Advertised address")
    port: int = Field(..., description="Advertised port")
    health_check_url: str = Field(..., description="HTTP health check target")
    health_timeout: timedelta
    health_interval: timedelta
    deregister_after: timedelta

    def to_consul(self) -> dict[str, Any]:
        """Body for ``PUT /v1/agent/service/register``."""
        return {
            "ID": self.id,
            "Name": self.name,
            "Address": self.address,
            "Port": self.port,
            "Check": {
                "HTTP": self.health_check_url,
                "Timeout": format_duration(self.health_timeout),
                "Interval": format_duration(self.health_interval),
                "DeregisterCriticalServiceAfter": format_duration(self.deregister_after),
            },
        }

"""
Application configuration using pydantic-settings.

All settings are loaded from environment variables (prefix ``SNMPWALK_``) or
a .env file, then overridden by command-line flags in ``snmpwalk_server.cli``.
The resulting Settings object is frozen and handed to ``create_app``.

Nested config（如 RegistryConfig）使用 ``__`` 分隔符：
    SNMPWALK_REGISTRY__ENABLED=true
    SNMPWALK_REGISTRY__SERVER_ADDR=172.18.0.3:8500
"""
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistryConfig(BaseModel):
    """Consul self-registration config."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Register into Consul at startup")
    server_addr: str = Field(
        default="172.18.0.3:8500",
        description="Consul agent address (host:port, scheme optional)",
    )
    service_addr: Optional[str] = Field(
        default=None,
        description="Advertised address; autodetected when empty. Never 0.0.0.0",
    )
    service_name: str = Field(default="snmpwalk-server", description="Consul service name")

    # Health check wired to /online_check
    check_timeout: timedelta = timedelta(seconds=3)
    check_interval: timedelta = timedelta(seconds=5)
    deregister_after: timedelta = timedelta(seconds=30)

    # HTTP timeout for the registration call itself
    request_timeout: float = 5.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SNMPWALK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
        frozen=True,
    )

    # Listener
    listen_addr: str = Field(default="0.0.0.0", description="Listen address")
    listen_port: int = Field(default=8085, description="Listen port")

    # Service registry
    registry: RegistryConfig = RegistryConfig()

    # Walk behaviour
    snmp_strict: bool = Field(
        default=False,
        description="Fail the walk on any non-zero agent error status",
    )
    reject_malformed_body: bool = Field(
        default=False,
        description="Answer 400 to unparseable walk requests instead of an empty response",
    )

    # Application
    app_name: str = Field(default="snmpwalk-server", description="Application name")
    app_debug: bool = Field(default=False, description="Debug mode")
    api_prefix: str = Field(default="/api", description="API prefix")


@lru_cache
def get_settings() -> Settings:
    """Get cached environment settings (before CLI overrides)."""
    return Settings()

"""Core module - contains enums and configuration."""
from .enums import RegistrationState, WalkFailureKind
from .config import RegistryConfig, Settings, get_settings

__all__ = [
    "RegistrationState",
    "WalkFailureKind",
    "RegistryConfig",
    "Settings",
    "get_settings",
]

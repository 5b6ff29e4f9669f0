"""Pydantic schemas for API request/response models."""
from .registry import RegistrationDescriptor
from .walk import WalkRequest, WalkResult

__all__ = [
    "RegistrationDescriptor",
    "WalkRequest",
    "WalkResult",
]

"""
Pydantic schemas for the walk API.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUCCESS_CODE = 0
FAILURE_CODE = -1


class WalkRequest(BaseModel):
    """Walk request body. Missing or null fields read as empty strings."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ip: str = Field(default="", description="Agent IPv4/IPv6 address or hostname")
    community: str = Field(default="", description="SNMP v2c community string")
    target_oid: str = Field(
        default="",
        alias="targetOid",
        description="Dotted-decimal root OID of the subtree to walk",
    )

    @field_validator("ip", "community", "target_oid", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class WalkResult(BaseModel):
    """Walk envelope: ``{"code":0,"data":{...}}`` or ``{"code":-1}``."""

    code: int = Field(..., description="0 on success, -1 on failure")
    data: Optional[dict[str, str]] = Field(
        default=None,
        description="Relative OID suffix → value text; absent on failure",
    )

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_CODE

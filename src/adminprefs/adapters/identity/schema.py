"""Pydantic models describing Identity Toolkit REST payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IdentityBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ErrorDetail(IdentityBaseModel):
    code: int | None = None
    message: str = "UNKNOWN_ERROR"


class ErrorResponse(IdentityBaseModel):
    error: ErrorDetail


class UserPayload(IdentityBaseModel):
    local_id: str = Field(alias="localId")
    email: str | None = None
    email_verified: bool = Field(default=False, alias="emailVerified")
    disabled: bool = False


class LookupResponse(IdentityBaseModel):
    users: list[UserPayload] = Field(default_factory=list)


class OobCodeResponse(IdentityBaseModel):
    email: str | None = None
    oob_link: str = Field(alias="oobLink")


class UpdateResponse(IdentityBaseModel):
    local_id: str = Field(alias="localId")
    email: str | None = None
    email_verified: bool = Field(default=False, alias="emailVerified")


__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "LookupResponse",
    "OobCodeResponse",
    "UpdateResponse",
    "UserPayload",
]

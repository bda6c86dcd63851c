"""Port for the identity / authentication provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class IdentityProviderError(RuntimeError):
    """Raised when the identity provider rejects or fails a request."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class InvalidIdTokenError(IdentityProviderError):
    """Raised when an ID token is malformed, expired, revoked or unknown."""


@dataclass(frozen=True, slots=True)
class DecodedIdToken:
    uid: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class IdentityRecord:
    uid: str
    email: str | None = None
    email_verified: bool = False


@runtime_checkable
class IdentityProvider(Protocol):
    def verify_id_token(self, token: str, *, check_revoked: bool = True) -> DecodedIdToken: ...

    def get_user(self, uid: str) -> IdentityRecord: ...

    def generate_email_verification_link(self, email: str) -> str: ...

    def update_user(self, uid: str, *, email: str, email_verified: bool) -> IdentityRecord: ...

"""Errors surfaced by settings operations.

``SettingsAccessError`` carries a stable ``code`` that callers use to pick the
message they render. Everything else raised here is an untyped user error:
callers show the message and do not retry.
"""

from __future__ import annotations

from enum import StrEnum


class SettingsErrorCode(StrEnum):
    UNAUTHORIZED = "UNAUTHORIZED"
    ADMIN_SDK_UNAVAILABLE = "ADMIN_SDK_UNAVAILABLE"
    FIRESTORE_ERROR = "FIRESTORE_ERROR"
    EMAIL_TRANSPORT_UNCONFIGURED = "EMAIL_TRANSPORT_UNCONFIGURED"
    ROLLBACK_INVALID = "ROLLBACK_INVALID"


class SettingsAccessError(RuntimeError):
    """Raised when a backend is unreachable, unconfigured, or a request is not permitted."""

    def __init__(self, code: SettingsErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class RateLimitExceeded(RuntimeError):  # noqa: N818
    """Raised when a rate-limited action is repeated inside its cooldown window."""


class ReauthenticationRequired(RuntimeError):  # noqa: N818
    """Raised when a re-authentication token does not prove the current principal."""


class AccentContrastError(ValueError):
    """Raised when an accent colour is not readable behind foreground text."""


__all__ = [
    "AccentContrastError",
    "RateLimitExceeded",
    "ReauthenticationRequired",
    "SettingsAccessError",
    "SettingsErrorCode",
]

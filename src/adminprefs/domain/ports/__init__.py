"""Domain port definitions for adapters."""

from __future__ import annotations

from .identity import (
    DecodedIdToken,
    IdentityProvider,
    IdentityProviderError,
    IdentityRecord,
    InvalidIdTokenError,
)
from .mail import VerificationMailer, VerificationMessage
from .persistence import SettingsStore
from .session import AdminSession
from .storage import ObjectStorage, ObjectStorageError, StoredObject

__all__ = [
    "AdminSession",
    "DecodedIdToken",
    "IdentityProvider",
    "IdentityProviderError",
    "IdentityRecord",
    "InvalidIdTokenError",
    "ObjectStorage",
    "ObjectStorageError",
    "SettingsStore",
    "StoredObject",
    "VerificationMailer",
    "VerificationMessage",
]

"""Port for binary object storage (avatars)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


class ObjectStorageError(RuntimeError):
    """Raised when an object cannot be stored or removed."""


@dataclass(frozen=True, slots=True)
class StoredObject:
    path: str
    url: str


@runtime_checkable
class ObjectStorage(Protocol):
    def upload(self, path: str, data: bytes, *, content_type: str) -> StoredObject: ...

    def delete(self, path: str) -> None:
        """Remove ``path``; removing a missing object is not an error."""
        ...

    def exists(self, path: str) -> bool: ...

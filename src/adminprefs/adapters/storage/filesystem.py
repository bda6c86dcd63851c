"""Object storage on the local filesystem."""

from __future__ import annotations

import os
import tempfile
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from adminprefs.config.storage import get_object_storage_config
from adminprefs.domain.ports.storage import ObjectStorage, ObjectStorageError, StoredObject

if TYPE_CHECKING:
    from adminprefs.config.storage import ObjectStorageConfig

log = getLogger(__name__)


class LocalObjectStorage:
    """Stores objects as files below ``root``.

    Object paths are POSIX-style keys such as ``users/u1/avatar/<sha1>.webp``.
    Public URLs are ``<public_base_url>/<path>`` when a base URL is configured,
    otherwise ``file://`` URLs of the stored files.
    """

    def __init__(self, root: Path, *, public_base_url: str | None = None) -> None:
        self.root = root.expanduser().resolve()
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    @classmethod
    def from_config(cls, config: ObjectStorageConfig | None = None) -> LocalObjectStorage:
        resolved = config or get_object_storage_config()
        return cls(resolved.root, public_base_url=resolved.public_base_url)

    def upload(self, path: str, data: bytes, *, content_type: str) -> StoredObject:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with tempfile.NamedTemporaryFile(dir=target.parent, delete=False) as handle:
                handle.write(data)
                temp_path = Path(handle.name)
            temp_path.replace(target)
        except OSError as exc:
            raise ObjectStorageError(f"Unable to store object {path}") from exc
        log.debug("Stored %s (%s, %d bytes)", path, content_type, len(data))
        return StoredObject(path=path, url=self.public_url(path))

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise ObjectStorageError(f"Unable to delete object {path}") from exc
        log.debug("Deleted %s", path)

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def public_url(self, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{path}"
        return self._resolve(path).as_uri()

    def _resolve(self, path: str) -> Path:
        key = PurePosixPath(path)
        if not path or key.is_absolute() or ".." in key.parts:
            raise ObjectStorageError(f"Invalid object path: {path!r}")
        target = (self.root / os.fspath(key)).resolve()
        if not target.is_relative_to(self.root):
            raise ObjectStorageError(f"Object path escapes storage root: {path!r}")
        return target


if TYPE_CHECKING:
    _storage_check: ObjectStorage = LocalObjectStorage(Path())

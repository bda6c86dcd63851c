from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from adminprefs.adapters.storage import LocalObjectStorage
from adminprefs.config.storage import ObjectStorageConfig
from adminprefs.domain.ports.storage import ObjectStorage, ObjectStorageError

if TYPE_CHECKING:
    from pathlib import Path

AVATAR_PATH = "users/u1/avatar/abc.webp"


def test_upload_writes_file_and_builds_public_url(tmp_path: Path) -> None:
    storage = LocalObjectStorage(tmp_path, public_base_url="https://cdn.example.com/")

    stored = storage.upload(AVATAR_PATH, b"image", content_type="image/webp")

    assert stored.path == AVATAR_PATH
    assert stored.url == f"https://cdn.example.com/{AVATAR_PATH}"
    assert (tmp_path / "users" / "u1" / "avatar" / "abc.webp").read_bytes() == b"image"
    assert storage.exists(AVATAR_PATH)
    assert isinstance(storage, ObjectStorage)


def test_upload_without_base_url_uses_file_uri(tmp_path: Path) -> None:
    storage = LocalObjectStorage(tmp_path)

    stored = storage.upload(AVATAR_PATH, b"image", content_type="image/webp")

    assert stored.url.startswith("file://")
    assert stored.url.endswith("abc.webp")


def test_upload_overwrites_existing_object(tmp_path: Path) -> None:
    storage = LocalObjectStorage(tmp_path)
    storage.upload(AVATAR_PATH, b"first", content_type="image/webp")

    storage.upload(AVATAR_PATH, b"second", content_type="image/webp")

    assert (tmp_path / AVATAR_PATH).read_bytes() == b"second"
    assert [entry.name for entry in (tmp_path / "users" / "u1" / "avatar").iterdir()] == [
        "abc.webp"
    ]


def test_delete_is_idempotent(tmp_path: Path) -> None:
    storage = LocalObjectStorage(tmp_path)
    storage.upload(AVATAR_PATH, b"image", content_type="image/webp")

    storage.delete(AVATAR_PATH)
    storage.delete(AVATAR_PATH)

    assert not storage.exists(AVATAR_PATH)


@pytest.mark.parametrize("path", ["", "/etc/passwd", "../outside.webp", "users/../../x"])
def test_paths_must_stay_inside_root(tmp_path: Path, path: str) -> None:
    storage = LocalObjectStorage(tmp_path / "root")

    with pytest.raises(ObjectStorageError):
        storage.upload(path, b"x", content_type="image/webp")


def test_from_config(tmp_path: Path) -> None:
    storage = LocalObjectStorage.from_config(
        ObjectStorageConfig(root=tmp_path, public_base_url="https://cdn.example.com")
    )

    assert storage.root == tmp_path.resolve()
    assert storage.public_url("a.webp") == "https://cdn.example.com/a.webp"

from __future__ import annotations

import hashlib

import pytest
from pydantic import ValidationError

from adminprefs.domain.errors import SettingsAccessError, SettingsErrorCode
from adminprefs.domain.model import Profile, SettingsDocument
from tests.helpers.settings import ADMIN_UID, ServiceHarness, make_service, profile_payload

OLD_PATH = f"users/{ADMIN_UID}/avatar/a.webp"
NEW_PATH = f"users/{ADMIN_UID}/avatar/b.webp"


def _seed_avatar(harness: ServiceHarness, path: str) -> SettingsDocument:
    document = SettingsDocument(
        profile=Profile(
            display_name="Ada Admin", email="admin@example.com", avatar_storage_path=path
        )
    )
    harness.store.documents[ADMIN_UID] = document
    harness.storage.objects[path] = b"old"
    return document


def test_upload_avatar_uses_content_addressed_path(harness: ServiceHarness) -> None:
    data = b"avatar-bytes"

    upload = harness.service.upload_avatar(data, "me.png", "image/png")

    digest = hashlib.sha1(data, usedforsecurity=False).hexdigest()
    assert upload.storage_path == f"users/{ADMIN_UID}/avatar/{digest}.png"
    assert upload.url.endswith(upload.storage_path)
    assert harness.storage.exists(upload.storage_path)


def test_upload_avatar_defaults_to_webp(harness: ServiceHarness) -> None:
    upload = harness.service.upload_avatar(b"x")

    assert upload.storage_path.endswith(".webp")


def test_upload_avatar_rejects_unsupported_type(harness: ServiceHarness) -> None:
    with pytest.raises(ValidationError):
        harness.service.upload_avatar(b"x", "a.gif", "image/gif")

    assert harness.storage.objects == {}


def test_upload_avatar_requires_storage() -> None:
    harness = make_service(storage=None)

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.upload_avatar(b"x")

    assert exc.value.code is SettingsErrorCode.ADMIN_SDK_UNAVAILABLE


def test_update_profile_then_rollback_restores_snapshot(harness: ServiceHarness) -> None:
    before = harness.service.load_settings()

    mutation = harness.service.update_profile(profile_payload())
    assert mutation.settings.profile.display_name == "Ada Admin"

    restored = harness.service.rollback_settings(mutation.rollback_token)

    assert restored == before
    assert harness.store.documents[ADMIN_UID] == before


def test_new_avatar_rollback_deletes_the_new_object(harness: ServiceHarness) -> None:
    before = _seed_avatar(harness, OLD_PATH)
    harness.storage.objects[NEW_PATH] = b"new"

    mutation = harness.service.update_profile(profile_payload(avatarStoragePath=NEW_PATH))
    assert mutation.settings.profile.avatar_storage_path == NEW_PATH

    harness.service.rollback_settings(mutation.rollback_token)

    assert harness.store.documents[ADMIN_UID] == before
    assert harness.storage.deleted == [NEW_PATH]
    assert harness.storage.exists(OLD_PATH)


def test_new_avatar_expiry_deletes_the_superseded_object(harness: ServiceHarness) -> None:
    _seed_avatar(harness, OLD_PATH)
    harness.storage.objects[NEW_PATH] = b"new"

    mutation = harness.service.update_profile(profile_payload(avatarStoragePath=NEW_PATH))
    harness.clock.advance(minutes=5, seconds=1)

    assert harness.tokens.sweep() == 1
    assert harness.storage.deleted == [OLD_PATH]
    assert harness.storage.exists(NEW_PATH)
    with pytest.raises(SettingsAccessError) as exc:
        harness.service.rollback_settings(mutation.rollback_token)
    assert exc.value.code is SettingsErrorCode.ROLLBACK_INVALID


def test_removed_avatar_is_deleted_only_on_expiry(harness: ServiceHarness) -> None:
    before = _seed_avatar(harness, OLD_PATH)

    mutation = harness.service.update_profile(profile_payload(avatarStoragePath=""))
    assert mutation.settings.profile.avatar_storage_path is None
    assert harness.storage.deleted == []

    harness.service.rollback_settings(mutation.rollback_token)
    assert harness.store.documents[ADMIN_UID] == before
    assert harness.storage.deleted == []

    second = harness.service.update_profile(profile_payload())
    harness.clock.advance(minutes=6)
    harness.tokens.sweep()

    assert harness.storage.deleted == [OLD_PATH]
    assert second.rollback_token not in harness.tokens


def test_unchanged_avatar_registers_no_compensation(harness: ServiceHarness) -> None:
    _seed_avatar(harness, OLD_PATH)

    mutation = harness.service.update_profile(profile_payload(avatarStoragePath=OLD_PATH))
    entry = harness.tokens.peek(mutation.rollback_token)

    assert entry is not None
    assert entry.on_rollback is None
    assert entry.on_expire is None


def test_failed_write_removes_orphaned_upload(harness: ServiceHarness) -> None:
    before = _seed_avatar(harness, OLD_PATH)
    harness.storage.objects[NEW_PATH] = b"new"
    harness.store.fail_writes = True

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.update_profile(profile_payload(avatarStoragePath=NEW_PATH))

    assert exc.value.code is SettingsErrorCode.FIRESTORE_ERROR
    assert harness.storage.deleted == [NEW_PATH]
    assert harness.storage.exists(OLD_PATH)
    assert harness.store.documents[ADMIN_UID] == before
    assert len(harness.tokens) == 0


def test_failed_read_is_reported_before_any_write(harness: ServiceHarness) -> None:
    harness.store.fail_reads = True

    with pytest.raises(SettingsAccessError, match="existing profile settings") as exc:
        harness.service.update_profile(profile_payload())

    assert exc.value.code is SettingsErrorCode.FIRESTORE_ERROR
    assert harness.store.writes == 0


def test_invalid_profile_is_rejected_before_side_effects(harness: ServiceHarness) -> None:
    with pytest.raises(ValidationError):
        harness.service.update_profile(profile_payload(displayName="A"))

    assert harness.store.writes == 0
    assert len(harness.tokens) == 0

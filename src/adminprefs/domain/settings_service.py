"""Settings mutations with undo across the document store, identity and object storage.

Every mutating operation follows the same order: resolve the admin, validate
input, read the current document, perform identity / storage side effects,
write the document and finally register a rollback token holding the
pre-mutation snapshot plus any compensations. A token is only ever issued
for a write that has already happened.

When a later step fails after an earlier one changed an external system, the
earlier change is compensated synchronously before the error propagates.
Compensation failures are logged and never replace the original error.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from adminprefs.domain.clock import Clock, utcnow
from adminprefs.domain.contrast import ensure_accessible_accent
from adminprefs.domain.errors import (
    ReauthenticationRequired,
    SettingsAccessError,
    SettingsErrorCode,
)
from adminprefs.domain.inputs import (
    AppearanceInput,
    AvatarFileInput,
    ChangeEmailInput,
    NotificationsInput,
    ProfileInput,
    SendVerificationInput,
)
from adminprefs.domain.model import (
    DEFAULT_APPEARANCE,
    DEFAULT_PROFILE,
    AvatarChange,
    NotificationChannel,
    SettingsDocument,
    SettingsUpdate,
    classify_avatar_change,
    with_email,
)
from adminprefs.domain.ports.identity import InvalidIdTokenError
from adminprefs.domain.ports.mail import VerificationMessage
from adminprefs.domain.rate_limit import DEFAULT_COOLDOWN, CooldownLimiter
from adminprefs.domain.rollback import DeleteStorageObject, RollbackTokenStore, run_compensation

if TYPE_CHECKING:
    from adminprefs.domain.ports import (
        AdminSession,
        IdentityProvider,
        ObjectStorage,
        SettingsStore,
        VerificationMailer,
    )
    from adminprefs.domain.rollback import Compensation

log = getLogger(__name__)

READ_ONLY_MESSAGE = (
    "Admin settings are read-only in this environment. Configure the settings database "
    "and identity provider credentials to enable persistence."
)
DEFAULT_SITE_NAME = "Admin"

AVATAR_EXTENSIONS: Mapping[str, str] = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
}


@dataclass(frozen=True, slots=True)
class SettingsMutation:
    """A written document and the token that undoes the write."""

    settings: SettingsDocument
    rollback_token: str


@dataclass(frozen=True, slots=True)
class AvatarUpload:
    url: str
    storage_path: str


@dataclass(frozen=True, slots=True)
class EmailVerificationResult:
    ok: bool = True


@dataclass(frozen=True, slots=True)
class NotificationCheckResult:
    ok: bool
    channel: NotificationChannel
    uid: str


def avatar_storage_path(uid: str, digest: str, content_type: str) -> str:
    extension = AVATAR_EXTENSIONS.get(content_type, "webp")
    return f"users/{uid}/avatar/{digest}.{extension}"


def email_change_limiter(
    *, window: timedelta = DEFAULT_COOLDOWN, clock: Clock = utcnow
) -> CooldownLimiter:
    return CooldownLimiter(
        "change-email",
        message="Email change is temporarily rate limited",
        window=window,
        clock=clock,
    )


def verification_limiter(
    *, window: timedelta = DEFAULT_COOLDOWN, clock: Clock = utcnow
) -> CooldownLimiter:
    return CooldownLimiter(
        "send-verification",
        message="Verification already requested recently",
        window=window,
        clock=clock,
    )


class SettingsService:
    """Coordinates settings mutations and their rollback tokens for one admin session."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        session: AdminSession,
        store: SettingsStore | None,
        mailer: VerificationMailer,
        identity: IdentityProvider | None = None,
        storage: ObjectStorage | None = None,
        tokens: RollbackTokenStore | None = None,
        email_cooldown: CooldownLimiter | None = None,
        verification_cooldown: CooldownLimiter | None = None,
        site_name: str = DEFAULT_SITE_NAME,
        read_only: bool = False,
        clock: Clock = utcnow,
    ) -> None:
        self._session = session
        self._store = store
        self._mailer = mailer
        self._identity = identity
        self._storage = storage
        self._clock = clock
        self.tokens = tokens or RollbackTokenStore(clock=clock)
        self.email_cooldown = email_cooldown or email_change_limiter(clock=clock)
        self.verification_cooldown = verification_cooldown or verification_limiter(clock=clock)
        self.site_name = site_name
        self.read_only = read_only

    # -- access -----------------------------------------------------------------

    def _ensure_admin(self, context: str) -> str:
        try:
            uid = self._session()
        except Exception as exc:
            log.warning("%s: failed to resolve admin session", context, exc_info=True)
            raise SettingsAccessError(
                SettingsErrorCode.UNAUTHORIZED,
                "Failed to resolve the current admin user from the session.",
            ) from exc
        if not uid:
            log.warning("%s: admin session missing or lacks permissions", context)
            raise SettingsAccessError(
                SettingsErrorCode.UNAUTHORIZED,
                "You do not have permission to manage admin settings.",
            )
        return uid

    def _require_store(self, context: str, uid: str) -> SettingsStore:
        if self.read_only:
            raise SettingsAccessError(SettingsErrorCode.ADMIN_SDK_UNAVAILABLE, READ_ONLY_MESSAGE)
        if self._store is None:
            log.error("%s: settings store unavailable for uid=%s", context, uid)
            raise SettingsAccessError(
                SettingsErrorCode.ADMIN_SDK_UNAVAILABLE,
                "The settings document store is unavailable. Configure DATABASE_URI "
                "or ADMINPREFS_DATA_DIR.",
            )
        return self._store

    def _require_identity(self, context: str, uid: str) -> IdentityProvider:
        if self.read_only:
            raise SettingsAccessError(SettingsErrorCode.ADMIN_SDK_UNAVAILABLE, READ_ONLY_MESSAGE)
        if self._identity is None:
            log.error("%s: identity provider unavailable for uid=%s", context, uid)
            raise SettingsAccessError(
                SettingsErrorCode.ADMIN_SDK_UNAVAILABLE,
                "Admin authentication is unavailable. Configure IDENTITY_PROJECT_ID "
                "and IDENTITY_API_KEY.",
            )
        return self._identity

    def _require_storage(self, context: str, uid: str) -> ObjectStorage:
        if self.read_only:
            raise SettingsAccessError(SettingsErrorCode.ADMIN_SDK_UNAVAILABLE, READ_ONLY_MESSAGE)
        if self._storage is None:
            log.error("%s: object storage unavailable for uid=%s", context, uid)
            raise SettingsAccessError(
                SettingsErrorCode.ADMIN_SDK_UNAVAILABLE,
                "Avatar storage is unavailable. Configure ADMINPREFS_OBJECTS_DIR.",
            )
        return self._storage

    def _read_current(
        self, store: SettingsStore, uid: str, *, context: str, message: str
    ) -> SettingsDocument | None:
        try:
            return store.read(uid)
        except SettingsAccessError:
            raise
        except Exception as exc:
            log.exception("%s: read failed for uid=%s", context, uid)
            raise SettingsAccessError(SettingsErrorCode.FIRESTORE_ERROR, message) from exc

    # -- reads ------------------------------------------------------------------

    def load_settings(self) -> SettingsDocument:
        """Return the admin's settings, creating the default document on first access."""

        uid = self._ensure_admin("load_settings")
        store = self._require_store("load_settings", uid)
        try:
            settings = store.read(uid)
            if settings is not None:
                return settings
            log.info("Initialising default settings document for uid=%s", uid)
            return store.write(uid, SettingsUpdate())
        except SettingsAccessError:
            raise
        except Exception as exc:
            log.exception("load_settings: store failure for uid=%s", uid)
            raise SettingsAccessError(
                SettingsErrorCode.FIRESTORE_ERROR,
                "Unable to load admin settings from the document store.",
            ) from exc

    # -- shared write primitive ----------------------------------------------------

    def _persist_updates(  # noqa: PLR0913
        self,
        uid: str,
        update: SettingsUpdate,
        *,
        current_settings: SettingsDocument | None = None,
        previous_auth_email: str | None = None,
        previous_email_verified: bool | None = None,
        on_rollback: Compensation | None = None,
        on_expire: Compensation | None = None,
    ) -> SettingsMutation:
        store = self._require_store("persist_updates", uid)
        try:
            current = current_settings or store.read(uid)
            settings = store.write(uid, update)
        except SettingsAccessError:
            raise
        except Exception as exc:
            log.exception(
                "persist_updates: write failed for uid=%s sections=%s",
                uid,
                list(update.sections()),
            )
            raise SettingsAccessError(
                SettingsErrorCode.FIRESTORE_ERROR,
                "Unable to persist admin settings changes.",
            ) from exc

        # Without a prior document the written one is the best available snapshot.
        token = self.tokens.issue(
            uid,
            current or settings,
            previous_auth_email=previous_auth_email,
            previous_email_verified=previous_email_verified,
            on_rollback=on_rollback,
            on_expire=on_expire,
        )
        return SettingsMutation(settings=settings, rollback_token=token)

    # -- profile ------------------------------------------------------------------

    def update_profile(self, data: ProfileInput | Mapping[str, object]) -> SettingsMutation:
        uid = self._ensure_admin("update_profile")
        parsed = ProfileInput.model_validate(data)
        store = self._require_store("update_profile", uid)
        current = self._read_current(
            store,
            uid,
            context="update_profile",
            message="Unable to read existing profile settings.",
        )

        previous_path = current.profile.avatar_storage_path if current else None
        next_path = parsed.avatar_storage_path
        change = classify_avatar_change(previous_path, next_path)

        on_rollback: Compensation | None = None
        on_expire: Compensation | None = None
        if change is AvatarChange.NEW and next_path:
            storage = self._require_storage("update_profile", uid)
            # Undo discards the new upload; expiry drops the superseded one.
            on_rollback = DeleteStorageObject(storage, next_path)
            if previous_path:
                on_expire = DeleteStorageObject(storage, previous_path)
        elif change is AvatarChange.REMOVED and previous_path:
            storage = self._require_storage("update_profile", uid)
            on_expire = DeleteStorageObject(storage, previous_path)

        try:
            return self._persist_updates(
                uid,
                SettingsUpdate(profile=parsed.to_profile()),
                current_settings=current,
                on_rollback=on_rollback,
                on_expire=on_expire,
            )
        except Exception:
            if change is AvatarChange.NEW and on_rollback is not None:
                # No token exists yet to carry the cleanup of the orphaned upload.
                run_compensation(on_rollback, context="update_profile:orphan", uid=uid)
            raise

    def upload_avatar(
        self,
        file_bytes: bytes,
        filename: str | None = None,
        mime_type: str | None = None,
    ) -> AvatarUpload:
        """Store an avatar image under a content-addressed path.

        The upload is not referenced by any document until ``update_profile``
        is called with the returned ``storage_path``.
        """

        uid = self._ensure_admin("upload_avatar")
        storage = self._require_storage("upload_avatar", uid)
        checked = AvatarFileInput.model_validate(
            {
                "name": filename or "avatar.webp",
                "size": len(file_bytes),
                "type": mime_type or "image/webp",
            }
        )
        digest = hashlib.sha1(file_bytes, usedforsecurity=False).hexdigest()
        path = avatar_storage_path(uid, digest, checked.content_type)
        stored = storage.upload(path, file_bytes, content_type=checked.content_type)
        log.info("Uploaded avatar for uid=%s to %s", uid, stored.path)
        return AvatarUpload(url=stored.url, storage_path=stored.path)

    # -- email --------------------------------------------------------------------

    def change_email(self, new_email: str, reauth_token: str) -> SettingsMutation:
        """Move the admin to ``new_email`` in the identity provider and the profile.

        Identity is updated before the document. A failed verification email or
        a failed document write reverts the identity record before the error
        propagates. The resulting token restores both systems.
        """

        uid = self._ensure_admin("change_email")
        parsed = ChangeEmailInput.model_validate(
            {"new_email": new_email, "reauth_token": reauth_token}
        )
        target = str(parsed.new_email)
        started_at = self.email_cooldown.ensure_ready(uid, now=self._clock())

        identity = self._require_identity("change_email", uid)
        store = self._require_store("change_email", uid)

        try:
            decoded = identity.verify_id_token(parsed.reauth_token, check_revoked=True)
        except InvalidIdTokenError as exc:
            raise ReauthenticationRequired("Reauthentication required") from exc
        if decoded.uid != uid:
            raise ReauthenticationRequired("Reauthentication required")

        record = identity.get_user(uid)
        previous_email = record.email
        previous_verified = record.email_verified
        verification_link = identity.generate_email_verification_link(target)

        identity.update_user(uid, email=target, email_verified=False)

        try:
            self._mailer.send(
                VerificationMessage(
                    recipient=target,
                    link=verification_link,
                    subject=f"{self.site_name} - Confirm your new email address",
                    heading="Confirm your new email address",
                    intro=(
                        f"We received a request to change the email on your {self.site_name} "
                        "admin account. Click the link below to confirm this change."
                    ),
                )
            )
        except Exception as exc:
            self._revert_identity(
                identity, uid, previous_email or target, email_verified=previous_verified
            )
            if isinstance(exc, SettingsAccessError):
                log.error("change_email:transport: %s (uid=%s)", exc, uid)
            raise

        try:
            current = self._read_current(
                store,
                uid,
                context="change_email",
                message="Unable to read settings while changing email.",
            )
            base_profile = current.profile if current else DEFAULT_PROFILE
            mutation = self._persist_updates(
                uid,
                SettingsUpdate(profile=with_email(base_profile, target)),
                current_settings=current,
                previous_auth_email=previous_email,
                previous_email_verified=previous_verified,
            )
        except Exception:
            self._revert_identity(
                identity, uid, previous_email or target, email_verified=previous_verified
            )
            raise

        self.email_cooldown.record(uid, started_at)
        log.info("Changed admin email for uid=%s", uid)
        return mutation

    def _revert_identity(
        self, identity: IdentityProvider, uid: str, email: str, *, email_verified: bool
    ) -> None:
        """Put back the pre-change address, or the verified flag when there was none."""
        try:
            identity.update_user(uid, email=email, email_verified=email_verified)
        except Exception:  # noqa: BLE001
            log.warning("change_email: failed to revert identity for uid=%s", uid, exc_info=True)

    def send_email_verification(self, email: str) -> EmailVerificationResult:
        uid = self._ensure_admin("send_email_verification")
        parsed = SendVerificationInput.model_validate({"email": email})
        started_at = self.verification_cooldown.ensure_ready(uid, now=self._clock())
        identity = self._require_identity("send_email_verification", uid)
        address = str(parsed.email)
        link = identity.generate_email_verification_link(address)
        try:
            self._mailer.send(
                VerificationMessage(
                    recipient=address,
                    link=link,
                    subject=f"{self.site_name} - Verify your email address",
                    heading="Verify your email address",
                    intro=f"Confirm your email to secure your {self.site_name} admin account.",
                )
            )
        except SettingsAccessError as exc:
            log.error("send_email_verification:transport: %s (uid=%s)", exc, uid)
            raise
        self.verification_cooldown.record(uid, started_at)
        return EmailVerificationResult(ok=True)

    # -- notifications & appearance ---------------------------------------------------

    def update_notifications(
        self, data: NotificationsInput | Mapping[str, object]
    ) -> SettingsMutation:
        uid = self._ensure_admin("update_notifications")
        parsed = NotificationsInput.model_validate(data)
        return self._persist_updates(uid, SettingsUpdate(notifications=parsed.to_preferences()))

    def send_test_notification(self, channel: Literal["email", "inApp"]) -> NotificationCheckResult:
        # Delivery is simulated; only the session is checked.
        uid = self._ensure_admin("send_test_notification")
        return NotificationCheckResult(ok=True, channel=NotificationChannel(channel), uid=uid)

    def update_appearance(self, data: AppearanceInput | Mapping[str, object]) -> SettingsMutation:
        uid = self._ensure_admin("update_appearance")
        parsed = AppearanceInput.model_validate(data)
        ensure_accessible_accent(parsed.accent)
        return self._persist_updates(uid, SettingsUpdate(appearance=parsed.to_appearance()))

    def reset_appearance(self) -> SettingsMutation:
        uid = self._ensure_admin("reset_appearance")
        return self._persist_updates(uid, SettingsUpdate(appearance=DEFAULT_APPEARANCE))

    # -- undo -----------------------------------------------------------------------

    def rollback_settings(self, token: str) -> SettingsDocument:
        """Restore the snapshot held by ``token`` and run its undo compensation.

        A failed document write puts the token back so the caller can retry
        until the window closes.
        """

        uid = self._ensure_admin("rollback_settings")
        entry = self.tokens.claim(token, uid=uid)
        try:
            store = self._require_store("rollback_settings", uid)
            store.replace(uid, entry.previous)
        except SettingsAccessError:
            self.tokens.reinstate(entry)
            raise
        except Exception as exc:
            self.tokens.reinstate(entry)
            log.exception("rollback_settings: restore failed for uid=%s", uid)
            raise SettingsAccessError(
                SettingsErrorCode.FIRESTORE_ERROR,
                "Unable to restore previous admin settings.",
            ) from exc

        try:
            if entry.restores_identity and entry.previous_auth_email:
                self._restore_identity(
                    uid,
                    entry.previous_auth_email,
                    email_verified=bool(entry.previous_email_verified),
                )
        finally:
            run_compensation(entry.on_rollback, context="rollback_settings", uid=uid)
        log.info("Rolled back settings for uid=%s", uid)
        return entry.previous

    def _restore_identity(self, uid: str, email: str, *, email_verified: bool) -> None:
        identity = self._require_identity("rollback_settings", uid)
        try:
            identity.update_user(uid, email=email, email_verified=email_verified)
        except Exception as exc:
            log.exception("rollback_settings: identity restore failed for uid=%s", uid)
            raise SettingsAccessError(
                SettingsErrorCode.ADMIN_SDK_UNAVAILABLE,
                "Settings were restored, but the account email could not be reverted.",
            ) from exc

"""Translate between stored settings payloads and domain documents.

Reads are lenient: a stored section that no longer validates is replaced by
the defaults for that section and logged, so one corrupt field never makes
the whole document unreadable.
"""

from __future__ import annotations

from datetime import time
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from adminprefs.domain.model import (
    DEFAULT_APPEARANCE,
    DEFAULT_NOTIFICATIONS,
    DEFAULT_PROFILE,
    Appearance,
    Density,
    EventToggles,
    NotificationPreferences,
    Profile,
    QuietHours,
    SettingsDocument,
    Theme,
)

from .schema import StoredAppearance, StoredNotifications, StoredProfile, StoredSettingsPayload

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

log = getLogger(__name__)


def _validate_section[TModel: BaseModel](
    model: type[TModel], raw: Mapping[str, object] | None, *, uid: str, section: str
) -> TModel | None:
    if raw is None:
        return None
    try:
        return model.model_validate(raw)
    except ValidationError:
        log.warning("Stored %s section for uid=%s is invalid; using defaults", section, uid)
        return None


def _profile(payload: StoredProfile | None) -> Profile:
    if payload is None:
        return DEFAULT_PROFILE
    return Profile(
        display_name=payload.display_name,
        email=payload.email,
        bio=payload.bio,
        timezone=payload.timezone,
        avatar_url=payload.avatar_url,
        avatar_storage_path=payload.avatar_storage_path,
    )


def _notifications(payload: StoredNotifications | None) -> NotificationPreferences:
    if payload is None:
        return DEFAULT_NOTIFICATIONS
    quiet = (
        QuietHours(
            start=time.fromisoformat(payload.quiet.start),
            end=time.fromisoformat(payload.quiet.end),
        )
        if payload.quiet
        else None
    )
    return NotificationPreferences(
        email_enabled=payload.email.enabled,
        in_app_enabled=payload.in_app.enabled,
        events=EventToggles(
            comments=payload.events.comments,
            applications=payload.events.applications,
            system=payload.events.system,
        ),
        quiet_hours=quiet,
    )


def _appearance(payload: StoredAppearance | None, *, uid: str) -> Appearance:
    if payload is None:
        return DEFAULT_APPEARANCE
    try:
        theme = Theme(payload.theme)
        density = Density(payload.density)
    except ValueError:
        log.warning("Stored appearance section for uid=%s is invalid; using defaults", uid)
        return DEFAULT_APPEARANCE
    return Appearance(
        theme=theme,
        accent=payload.accent,
        density=density,
        reduced_motion=payload.reduced_motion,
    )


def parse_settings_document(
    raw: Mapping[str, Any],
    *,
    uid: str,
    updated_at: datetime | None = None,
) -> SettingsDocument:
    """Build a ``SettingsDocument`` from a stored payload.

    ``updated_at`` comes from the row rather than the payload so that the
    timestamp keeps its full precision.
    """

    try:
        envelope = StoredSettingsPayload.model_validate(raw)
    except ValidationError:
        log.warning("Stored settings document for uid=%s is invalid; using defaults", uid)
        envelope = StoredSettingsPayload()

    profile = _validate_section(StoredProfile, envelope.profile, uid=uid, section="profile")
    notifications = _validate_section(
        StoredNotifications, envelope.notifications, uid=uid, section="notifications"
    )
    appearance = _validate_section(
        StoredAppearance, envelope.appearance, uid=uid, section="appearance"
    )
    return SettingsDocument(
        profile=_profile(profile),
        notifications=_notifications(notifications),
        appearance=_appearance(appearance, uid=uid),
        updated_at=updated_at,
    )


def dump_settings_document(document: SettingsDocument) -> dict[str, Any]:
    """Return the camelCase JSON payload stored for ``document``."""

    profile = document.profile
    notifications = document.notifications
    appearance = document.appearance
    quiet = notifications.quiet_hours
    payload: dict[str, Any] = {
        "profile": {
            "displayName": profile.display_name,
            "email": profile.email,
            "bio": profile.bio,
            "timezone": profile.timezone,
            "avatarUrl": profile.avatar_url,
            "avatarStoragePath": profile.avatar_storage_path,
        },
        "notifications": {
            "email": {"enabled": notifications.email_enabled},
            "inApp": {"enabled": notifications.in_app_enabled},
            "events": {
                "comments": notifications.events.comments,
                "applications": notifications.events.applications,
                "system": notifications.events.system,
            },
            "quiet": (
                {"from": quiet.start.strftime("%H:%M"), "to": quiet.end.strftime("%H:%M")}
                if quiet
                else None
            ),
        },
        "appearance": {
            "theme": appearance.theme.value,
            "accent": appearance.accent,
            "density": appearance.density.value,
            "reducedMotion": appearance.reduced_motion,
        },
    }
    if document.updated_at is not None:
        payload["updatedAt"] = int(document.updated_at.timestamp() * 1000)
    return payload


__all__ = ["dump_settings_document", "parse_settings_document"]

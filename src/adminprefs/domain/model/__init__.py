"""Settings domain model."""

from __future__ import annotations

from .enums import AvatarChange, Density, NotificationChannel, Theme
from .settings import (
    DEFAULT_ACCENT,
    DEFAULT_APPEARANCE,
    DEFAULT_NOTIFICATIONS,
    DEFAULT_PROFILE,
    Appearance,
    EventToggles,
    NotificationPreferences,
    Profile,
    QuietHours,
    SettingsDocument,
    SettingsUpdate,
    classify_avatar_change,
    default_settings,
    initials_from_name,
    merge_settings,
    with_email,
)

__all__ = [
    "DEFAULT_ACCENT",
    "DEFAULT_APPEARANCE",
    "DEFAULT_NOTIFICATIONS",
    "DEFAULT_PROFILE",
    "Appearance",
    "AvatarChange",
    "Density",
    "EventToggles",
    "NotificationChannel",
    "NotificationPreferences",
    "Profile",
    "QuietHours",
    "SettingsDocument",
    "SettingsUpdate",
    "Theme",
    "classify_avatar_change",
    "default_settings",
    "initials_from_name",
    "merge_settings",
    "with_email",
]

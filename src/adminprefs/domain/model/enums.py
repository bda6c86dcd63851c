"""Enumerations used across the settings model."""

from __future__ import annotations

from enum import StrEnum


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class Density(StrEnum):
    COMFORTABLE = "comfortable"
    COMPACT = "compact"


class NotificationChannel(StrEnum):
    EMAIL = "email"
    IN_APP = "inApp"


class AvatarChange(StrEnum):
    """How a profile update affects the stored avatar object."""

    NEW = "new"
    REMOVED = "removed"
    UNCHANGED = "unchanged"

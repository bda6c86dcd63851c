"""The per-principal settings document and its sections.

A principal owns exactly one ``SettingsDocument``. All sections are frozen
values, so a document read before a mutation doubles as the undo snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, time
from typing import TYPE_CHECKING

from adminprefs.domain.model.enums import AvatarChange, Density, Theme

if TYPE_CHECKING:
    from collections.abc import Iterator

DEFAULT_ACCENT = "#6366f1"


@dataclass(frozen=True, slots=True, kw_only=True)
class Profile:
    display_name: str = ""
    email: str = ""
    bio: str = ""
    timezone: str = ""
    avatar_url: str = ""
    avatar_storage_path: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class QuietHours:
    """Window in which notifications are held back; may wrap past midnight."""

    start: time
    end: time


@dataclass(frozen=True, slots=True, kw_only=True)
class EventToggles:
    comments: bool = True
    applications: bool = True
    system: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class NotificationPreferences:
    email_enabled: bool = True
    in_app_enabled: bool = True
    events: EventToggles = field(default_factory=EventToggles)
    quiet_hours: QuietHours | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Appearance:
    theme: Theme = Theme.SYSTEM
    accent: str = DEFAULT_ACCENT
    density: Density = Density.COMFORTABLE
    reduced_motion: bool = False


DEFAULT_PROFILE = Profile()
DEFAULT_NOTIFICATIONS = NotificationPreferences()
DEFAULT_APPEARANCE = Appearance()


@dataclass(frozen=True, slots=True, kw_only=True)
class SettingsDocument:
    profile: Profile = DEFAULT_PROFILE
    notifications: NotificationPreferences = DEFAULT_NOTIFICATIONS
    appearance: Appearance = DEFAULT_APPEARANCE
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class SettingsUpdate:
    """Partial update; ``None`` sections keep whatever is stored."""

    profile: Profile | None = None
    notifications: NotificationPreferences | None = None
    appearance: Appearance | None = None

    def sections(self) -> Iterator[str]:
        for name in ("profile", "notifications", "appearance"):
            if getattr(self, name) is not None:
                yield name

    @classmethod
    def from_document(cls, document: SettingsDocument) -> SettingsUpdate:
        return cls(
            profile=document.profile,
            notifications=document.notifications,
            appearance=document.appearance,
        )


def default_settings(*, updated_at: datetime | None = None) -> SettingsDocument:
    return SettingsDocument(updated_at=updated_at)


def merge_settings(
    existing: SettingsDocument | None,
    update: SettingsUpdate,
    *,
    updated_at: datetime | None = None,
) -> SettingsDocument:
    """Shallow-merge ``update`` into ``existing`` (or the defaults).

    Each section present in the update replaces the stored section as a whole.
    """

    base = existing or default_settings()
    return SettingsDocument(
        profile=update.profile if update.profile is not None else base.profile,
        notifications=(
            update.notifications if update.notifications is not None else base.notifications
        ),
        appearance=update.appearance if update.appearance is not None else base.appearance,
        updated_at=updated_at or datetime.now(UTC),
    )


def classify_avatar_change(previous_path: str | None, next_path: str | None) -> AvatarChange:
    if next_path and next_path != previous_path:
        return AvatarChange.NEW
    if not next_path and previous_path:
        return AvatarChange.REMOVED
    return AvatarChange.UNCHANGED


def with_email(profile: Profile, email: str) -> Profile:
    """Return ``profile`` pointing at ``email``, naming it after the address if unnamed."""

    return replace(profile, email=email, display_name=profile.display_name or email)


def initials_from_name(name: str) -> str:
    parts = name.strip().split()[:2]
    return "".join(part[0].upper() for part in parts) or "?"

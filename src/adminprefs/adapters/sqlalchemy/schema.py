"""Pydantic models describing the stored settings JSON document."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from adminprefs.domain.model import DEFAULT_ACCENT


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class StoredBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StoredProfile(StoredBaseModel):
    display_name: str = Field(default="", alias="displayName")
    email: str = ""
    bio: str = ""
    timezone: str = ""
    avatar_url: str = Field(default="", alias="avatarUrl")
    avatar_storage_path: str | None = Field(default=None, alias="avatarStoragePath")

    _normalize_path = field_validator("avatar_storage_path", mode="before")(_blank_to_none)


class StoredToggle(StoredBaseModel):
    enabled: bool = True


class StoredEvents(StoredBaseModel):
    comments: bool = True
    applications: bool = True
    system: bool = True


class StoredQuietHours(StoredBaseModel):
    start: str = Field(alias="from", pattern=r"^([01]\d|2[0-3]):([0-5]\d)$")
    end: str = Field(alias="to", pattern=r"^([01]\d|2[0-3]):([0-5]\d)$")


class StoredNotifications(StoredBaseModel):
    email: StoredToggle = Field(default_factory=StoredToggle)
    in_app: StoredToggle = Field(default_factory=StoredToggle, alias="inApp")
    events: StoredEvents = Field(default_factory=StoredEvents)
    quiet: StoredQuietHours | None = None


class StoredAppearance(StoredBaseModel):
    theme: str = "system"
    accent: str = DEFAULT_ACCENT
    density: str = "comfortable"
    reduced_motion: bool = Field(default=False, alias="reducedMotion")


class StoredSettingsPayload(StoredBaseModel):
    """Envelope only; sections are validated one at a time by the translator."""

    profile: dict[str, object] | None = None
    notifications: dict[str, object] | None = None
    appearance: dict[str, object] | None = None
    updated_at: int | None = Field(default=None, alias="updatedAt")


__all__ = [
    "StoredAppearance",
    "StoredEvents",
    "StoredNotifications",
    "StoredProfile",
    "StoredQuietHours",
    "StoredSettingsPayload",
    "StoredToggle",
]

"""Pydantic schemas validating caller input before any side effect happens."""

from __future__ import annotations

from datetime import time
from typing import Annotated, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    HttpUrl,
    TypeAdapter,
    field_validator,
)

from adminprefs.domain.model import (
    Appearance,
    Density,
    EventToggles,
    NotificationPreferences,
    Profile,
    QuietHours,
    Theme,
)

MAX_AVATAR_BYTES = 2 * 1024 * 1024
AccentHex = Annotated[str, Field(pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$")]
ClockTime = Annotated[str, Field(pattern=r"^([01]\d|2[0-3]):([0-5]\d)$")]

_HTTP_URL: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _check_url(value: str) -> str:
    if value:
        _HTTP_URL.validate_python(value)
    return value


class InputModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class ProfileInput(InputModel):
    display_name: str = Field(min_length=2, max_length=50, alias="displayName")
    email: EmailStr
    bio: str = Field(default="", max_length=500)
    timezone: str = ""
    avatar_url: Annotated[str, AfterValidator(_check_url)] = Field(default="", alias="avatarUrl")
    avatar_storage_path: str | None = Field(default=None, alias="avatarStoragePath")

    @field_validator("display_name", "bio", "timezone", "avatar_url", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return _strip(value)

    @field_validator("avatar_storage_path", mode="before")
    @classmethod
    def _blank_path_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return _strip(value)

    def to_profile(self) -> Profile:
        return Profile(
            display_name=self.display_name,
            email=str(self.email),
            bio=self.bio,
            timezone=self.timezone,
            avatar_url=self.avatar_url,
            avatar_storage_path=self.avatar_storage_path,
        )


class QuietHoursInput(InputModel):
    start: ClockTime = Field(alias="from")
    end: ClockTime = Field(alias="to")

    def to_quiet_hours(self) -> QuietHours:
        return QuietHours(start=time.fromisoformat(self.start), end=time.fromisoformat(self.end))


class EventTogglesInput(InputModel):
    comments: bool
    applications: bool
    system: bool


class NotificationsInput(InputModel):
    email_enabled: bool = Field(alias="emailEnabled")
    in_app_enabled: bool = Field(alias="inAppEnabled")
    events: EventTogglesInput
    quiet_hours: QuietHoursInput | None = Field(default=None, alias="quietHours")

    def to_preferences(self) -> NotificationPreferences:
        return NotificationPreferences(
            email_enabled=self.email_enabled,
            in_app_enabled=self.in_app_enabled,
            events=EventToggles(
                comments=self.events.comments,
                applications=self.events.applications,
                system=self.events.system,
            ),
            quiet_hours=self.quiet_hours.to_quiet_hours() if self.quiet_hours else None,
        )


class AppearanceInput(InputModel):
    theme: Theme
    accent: AccentHex
    density: Density = Density.COMFORTABLE
    reduced_motion: bool = Field(default=False, alias="reducedMotion")

    def to_appearance(self) -> Appearance:
        return Appearance(
            theme=self.theme,
            accent=self.accent.lower(),
            density=self.density,
            reduced_motion=self.reduced_motion,
        )


class ChangeEmailInput(InputModel):
    new_email: EmailStr = Field(alias="newEmail")
    reauth_token: str = Field(min_length=1, alias="reauthToken")


class SendVerificationInput(InputModel):
    email: EmailStr


class AvatarFileInput(InputModel):
    name: str = Field(min_length=1)
    size: int = Field(ge=0, le=MAX_AVATAR_BYTES)
    content_type: Literal["image/png", "image/jpeg", "image/jpg", "image/webp"] = Field(
        alias="type"
    )


__all__ = [
    "MAX_AVATAR_BYTES",
    "AppearanceInput",
    "AvatarFileInput",
    "ChangeEmailInput",
    "EventTogglesInput",
    "NotificationsInput",
    "ProfileInput",
    "QuietHoursInput",
    "SendVerificationInput",
]

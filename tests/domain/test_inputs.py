from __future__ import annotations

from datetime import time

import pytest
from pydantic import ValidationError

from adminprefs.domain.inputs import (
    MAX_AVATAR_BYTES,
    AppearanceInput,
    AvatarFileInput,
    ChangeEmailInput,
    NotificationsInput,
    ProfileInput,
)
from adminprefs.domain.model import Density, Theme
from tests.helpers.settings import notifications_payload, profile_payload


def test_profile_input_strips_text_and_blank_storage_path() -> None:
    parsed = ProfileInput.model_validate(
        profile_payload(displayName="  Ada Admin  ", avatarStoragePath="   ")
    )

    profile = parsed.to_profile()
    assert profile.display_name == "Ada Admin"
    assert profile.avatar_storage_path is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"displayName": "A"},
        {"displayName": "x" * 51},
        {"email": "not-an-email"},
        {"bio": "x" * 501},
        {"avatarUrl": "not a url"},
        {"unexpected": True},
    ],
)
def test_profile_input_rejects_invalid_values(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        ProfileInput.model_validate(profile_payload(**overrides))


def test_profile_input_accepts_http_avatar_url() -> None:
    parsed = ProfileInput.model_validate(
        profile_payload(avatarUrl="https://cdn.example.com/a.webp")
    )

    assert parsed.avatar_url == "https://cdn.example.com/a.webp"


def test_notifications_input_parses_quiet_hours() -> None:
    preferences = NotificationsInput.model_validate(notifications_payload()).to_preferences()

    assert preferences.email_enabled is False
    assert preferences.events.applications is False
    assert preferences.quiet_hours is not None
    assert preferences.quiet_hours.start == time(22, 0)
    assert preferences.quiet_hours.end == time(7, 0)


def test_notifications_input_rejects_malformed_quiet_hours() -> None:
    with pytest.raises(ValidationError):
        NotificationsInput.model_validate(
            notifications_payload(quietHours={"from": "24:00", "to": "07:00"})
        )


def test_appearance_input_defaults_and_normalises_accent() -> None:
    appearance = AppearanceInput.model_validate({"theme": "light", "accent": "#4F46E5"})

    result = appearance.to_appearance()
    assert result.theme is Theme.LIGHT
    assert result.accent == "#4f46e5"
    assert result.density is Density.COMFORTABLE
    assert result.reduced_motion is False


@pytest.mark.parametrize("accent", ["4f46e5", "#4f46e", "#ggg", "red"])
def test_appearance_input_rejects_non_hex_accent(accent: str) -> None:
    with pytest.raises(ValidationError):
        AppearanceInput.model_validate({"theme": "dark", "accent": accent})


def test_change_email_input_requires_token() -> None:
    with pytest.raises(ValidationError):
        ChangeEmailInput.model_validate({"newEmail": "new@example.com", "reauthToken": ""})


def test_avatar_file_input_limits() -> None:
    AvatarFileInput.model_validate({"name": "a.png", "size": MAX_AVATAR_BYTES, "type": "image/png"})

    with pytest.raises(ValidationError):
        AvatarFileInput.model_validate(
            {"name": "a.png", "size": MAX_AVATAR_BYTES + 1, "type": "image/png"}
        )
    with pytest.raises(ValidationError):
        AvatarFileInput.model_validate({"name": "a.gif", "size": 10, "type": "image/gif"})

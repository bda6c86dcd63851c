"""WCAG contrast helpers for accent colours."""

from __future__ import annotations

from dataclasses import dataclass

from adminprefs.domain.errors import AccentContrastError

AA_MINIMUM_RATIO = 4.5
FOREGROUND_TEXT = "#ffffff"


@dataclass(frozen=True, slots=True)
class ContrastResult:
    ratio: float
    meets_aa: bool


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    normalized = value.removeprefix("#")
    if len(normalized) == 3:  # noqa: PLR2004
        normalized = "".join(char * 2 for char in normalized)
    if len(normalized) != 6:  # noqa: PLR2004
        raise ValueError(f"Invalid hex colour: {value!r}")
    packed = int(normalized, 16)
    return (packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF


def relative_luminance(rgb: tuple[int, int, int]) -> float:
    def channel(value: int) -> float:
        srgb = value / 255
        return srgb / 12.92 if srgb <= 0.03928 else ((srgb + 0.055) / 1.055) ** 2.4  # noqa: PLR2004

    red, green, blue = (channel(value) for value in rgb)
    return 0.2126 * red + 0.7152 * green + 0.0722 * blue


def get_contrast_ratio(color: str, against: str = FOREGROUND_TEXT) -> ContrastResult:
    first = relative_luminance(hex_to_rgb(color))
    second = relative_luminance(hex_to_rgb(against))
    lighter, darker = max(first, second), min(first, second)
    ratio = (lighter + 0.05) / (darker + 0.05)
    return ContrastResult(ratio=ratio, meets_aa=ratio >= AA_MINIMUM_RATIO)


def ensure_accessible_accent(color: str, against: str = FOREGROUND_TEXT) -> ContrastResult:
    result = get_contrast_ratio(color, against)
    if not result.meets_aa:
        raise AccentContrastError("Accent color does not meet contrast requirements")
    return result

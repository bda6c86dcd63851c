"""Email transport and site branding configuration."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from .env import env_flag, optional_env_var
from .errors import ConfigurationError

DEFAULT_SMTP_PORT = 587
DEFAULT_SITE_NAME = "Admin"
DEFAULT_SITE_URL = "http://localhost:3000"


@dataclass(frozen=True, slots=True)
class SiteConfig:
    name: str = DEFAULT_SITE_NAME
    url: str = DEFAULT_SITE_URL

    @property
    def hostname(self) -> str:
        return urlsplit(self.url).hostname or "localhost"


@dataclass(frozen=True, slots=True)
class SmtpConfig:
    host: str
    from_address: str
    port: int = DEFAULT_SMTP_PORT
    secure: bool = False
    user: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class MailConfig:
    """Mail delivery settings; ``smtp`` is ``None`` when no transport is configured."""

    site: SiteConfig
    smtp: SmtpConfig | None = None
    test_mode: bool = False


def get_site_config() -> SiteConfig:
    return SiteConfig(
        name=optional_env_var("SITE_NAME") or DEFAULT_SITE_NAME,
        url=optional_env_var("SITE_URL") or DEFAULT_SITE_URL,
    )


def _parse_port(value: str | None) -> int:
    if value is None:
        return DEFAULT_SMTP_PORT
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid SMTP_PORT: {value!r}") from exc


def get_mail_config() -> MailConfig:
    site = get_site_config()
    test_mode = env_flag("ADMINPREFS_TEST_MODE")
    host = optional_env_var("SMTP_HOST")
    if host is None:
        return MailConfig(site=site, smtp=None, test_mode=test_mode)

    user = optional_env_var("SMTP_USER")
    from_address = user or optional_env_var("ADMIN_EMAIL") or f"no-reply@{site.hostname}"
    smtp = SmtpConfig(
        host=host,
        port=_parse_port(optional_env_var("SMTP_PORT")),
        secure=env_flag("SMTP_SECURE"),
        user=user,
        password=optional_env_var("SMTP_PASS"),
        from_address=from_address,
    )
    return MailConfig(site=site, smtp=smtp, test_mode=test_mode)

"""Identity provider configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_IDENTITY_BASE_URL = "https://identitytoolkit.googleapis.com/v1/"


@dataclass(frozen=True, slots=True)
class IdentityConfig:
    """Holds identity provider API configuration values."""

    project_id: str
    api_key: str
    resilience: ResilienceConfig
    access_token: str | None = None


def default_identity_resilience(base_url: str = DEFAULT_IDENTITY_BASE_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="identity",
        retry=RetryPolicy(),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
    ).with_base_url(base_url)


def get_identity_config(*, resilience: ResilienceConfig | None = None) -> IdentityConfig:
    values = require_env_vars(("IDENTITY_PROJECT_ID", "IDENTITY_API_KEY"))
    base_url = optional_env_var("IDENTITY_BASE_URL") or DEFAULT_IDENTITY_BASE_URL
    return IdentityConfig(
        project_id=values["IDENTITY_PROJECT_ID"],
        api_key=values["IDENTITY_API_KEY"],
        access_token=optional_env_var("IDENTITY_ACCESS_TOKEN"),
        resilience=resilience or default_identity_resilience(base_url),
    )

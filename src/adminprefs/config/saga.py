"""Timing defaults for settings mutations and their undo windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_flag, env_float

DEFAULT_ROLLBACK_TTL_SECONDS = 5 * 60.0
DEFAULT_COOLDOWN_SECONDS = 60.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class SagaConfig:
    rollback_ttl: timedelta = timedelta(seconds=DEFAULT_ROLLBACK_TTL_SECONDS)
    cooldown: timedelta = timedelta(seconds=DEFAULT_COOLDOWN_SECONDS)
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    read_only: bool = False


def get_saga_config() -> SagaConfig:
    return SagaConfig(
        rollback_ttl=timedelta(
            seconds=env_float("ROLLBACK_TTL_SECONDS", default=DEFAULT_ROLLBACK_TTL_SECONDS)
        ),
        cooldown=timedelta(seconds=env_float("COOLDOWN_SECONDS", default=DEFAULT_COOLDOWN_SECONDS)),
        sweep_interval_seconds=env_float(
            "SWEEP_INTERVAL_SECONDS", default=DEFAULT_SWEEP_INTERVAL_SECONDS
        ),
        read_only=env_flag("ADMINPREFS_READ_ONLY"),
    )

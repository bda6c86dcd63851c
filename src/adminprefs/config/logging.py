"""Logging setup for the adminprefs CLI."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "ADMINPREFS_LOG_LEVEL"
_NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(default: int = logging.INFO) -> int:
    """Level named by ``ADMINPREFS_LOG_LEVEL``, or ``default`` when unset or unknown."""
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelNamesMapping().get(name)
    return default if level is None else level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger.

    ``force=True`` replaces handlers installed earlier, which tests rely on.
    HTTP client chatter is held at WARNING so request URLs carrying the API key
    do not end up in INFO output.
    """

    logging.basicConfig(
        level=resolve_log_level() if level is None else level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

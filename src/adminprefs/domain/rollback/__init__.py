"""Undo windows for settings mutations."""

from __future__ import annotations

from .compensation import Compensation, DeleteStorageObject, run_compensation
from .sweeper import ExpirySweeper
from .tokens import (
    DEFAULT_ROLLBACK_TTL,
    ROLLBACK_INVALID_MESSAGE,
    RollbackEntry,
    RollbackTokenStore,
    rollback_invalid,
)

__all__ = [
    "DEFAULT_ROLLBACK_TTL",
    "ROLLBACK_INVALID_MESSAGE",
    "Compensation",
    "DeleteStorageObject",
    "ExpirySweeper",
    "RollbackEntry",
    "RollbackTokenStore",
    "rollback_invalid",
    "run_compensation",
]

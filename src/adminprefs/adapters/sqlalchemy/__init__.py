"""SQLAlchemy adapter package for adminprefs."""

from __future__ import annotations

from .mappings import create_all_tables, metadata, settings_document_table
from .repositories import SqlAlchemySettingsRepository
from .store import SqlAlchemySettingsStore
from .unit_of_work import (
    SqlAlchemySettingsUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemySettingsRepository",
    "SqlAlchemySettingsStore",
    "SqlAlchemySettingsUnitOfWork",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "settings_document_table",
    "shutdown",
    "startup",
]

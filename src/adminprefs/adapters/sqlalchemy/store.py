"""``SettingsStore`` implementation on top of the SQLAlchemy unit of work."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from adminprefs.adapters.sqlalchemy.unit_of_work import SqlAlchemySettingsUnitOfWork
from adminprefs.domain.clock import Clock, utcnow
from adminprefs.domain.model import merge_settings

if TYPE_CHECKING:
    from adminprefs.domain.model import SettingsDocument, SettingsUpdate

log = getLogger(__name__)

type UnitOfWorkFactory = Callable[[], SqlAlchemySettingsUnitOfWork]


class SqlAlchemySettingsStore:
    """One row per uid; writes merge inside a single transaction."""

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory = SqlAlchemySettingsUnitOfWork,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def read(self, uid: str) -> SettingsDocument | None:
        with self._uow_factory() as uow:
            return uow.settings.get(uid)

    def write(self, uid: str, update: SettingsUpdate) -> SettingsDocument:
        with self._uow_factory() as uow:
            merged = merge_settings(uow.settings.get(uid), update, updated_at=self._clock())
            uow.settings.save(uid, merged)
            uow.commit()
        log.debug("Wrote settings sections %s for uid=%s", list(update.sections()), uid)
        return merged

    def replace(self, uid: str, document: SettingsDocument) -> SettingsDocument:
        with self._uow_factory() as uow:
            uow.settings.save(uid, document)
            uow.commit()
        return document


__all__ = ["SqlAlchemySettingsStore"]

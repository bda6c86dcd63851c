"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update

from adminprefs.adapters.sqlalchemy.mappings import settings_document_table
from adminprefs.adapters.sqlalchemy.translator import (
    dump_settings_document,
    parse_settings_document,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from adminprefs.domain.model import SettingsDocument


class SqlAlchemySettingsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, uid: str) -> SettingsDocument | None:
        stmt = select(
            settings_document_table.c.document, settings_document_table.c.updated_at
        ).where(settings_document_table.c.uid == uid)
        row = self.session.execute(stmt).one_or_none()
        if row is None:
            return None
        return parse_settings_document(row.document or {}, uid=uid, updated_at=row.updated_at)

    def exists(self, uid: str) -> bool:
        stmt = select(settings_document_table.c.uid).where(settings_document_table.c.uid == uid)
        return self.session.execute(stmt).scalar_one_or_none() is not None

    def save(self, uid: str, document: SettingsDocument) -> None:
        values = {
            "document": dump_settings_document(document),
            "updated_at": document.updated_at,
        }
        if self.exists(uid):
            self.session.execute(
                update(settings_document_table)
                .where(settings_document_table.c.uid == uid)
                .values(**values)
            )
        else:
            self.session.execute(insert(settings_document_table).values(uid=uid, **values))

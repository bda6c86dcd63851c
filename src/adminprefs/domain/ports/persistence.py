"""Port for the settings document store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from adminprefs.domain.model import SettingsDocument, SettingsUpdate


@runtime_checkable
class SettingsStore(Protocol):
    """Reads and writes the settings document of a principal; no business rules."""

    def read(self, uid: str) -> SettingsDocument | None: ...

    def write(self, uid: str, update: SettingsUpdate) -> SettingsDocument:
        """Merge ``update`` into the stored document (or the defaults) and return the result."""
        ...

    def replace(self, uid: str, document: SettingsDocument) -> SettingsDocument:
        """Store ``document`` verbatim, including its ``updated_at``."""
        ...

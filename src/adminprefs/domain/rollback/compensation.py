"""Compensating actions attached to undo windows."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adminprefs.domain.ports.storage import ObjectStorage

log = getLogger(__name__)

type Compensation = Callable[[], None]


@dataclass(frozen=True, slots=True)
class DeleteStorageObject:
    """Remove an object that is no longer referenced by any settings document."""

    storage: ObjectStorage
    path: str

    def __call__(self) -> None:
        self.storage.delete(self.path)


def run_compensation(action: Compensation | None, *, context: str, uid: str) -> bool:
    """Run ``action`` best-effort; return whether it completed."""

    if action is None:
        return True
    try:
        action()
    except Exception:  # noqa: BLE001
        log.warning("%s: compensation %r failed for uid=%s", context, action, uid, exc_info=True)
        return False
    return True

"""Port resolving the administrator behind the current request."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AdminSession(Protocol):
    """Return the uid of the authorised administrator, ``None`` when there is none."""

    def __call__(self) -> str | None: ...

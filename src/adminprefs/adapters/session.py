"""Admin session resolvers for non-web callers (CLI, scripts, tests)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adminprefs.domain.ports.session import AdminSession


@dataclass(frozen=True, slots=True)
class StaticAdminSession:
    """Always resolves to ``uid``; an empty uid behaves like a missing session."""

    uid: str | None

    def __call__(self) -> str | None:
        return self.uid or None


if TYPE_CHECKING:
    _session_check: AdminSession = StaticAdminSession("check")

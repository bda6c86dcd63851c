"""In-memory registry of undo windows.

Every successful settings mutation registers one ``RollbackEntry`` under a
fresh token. An entry leaves the registry exactly once: either a caller claims
it to undo the mutation, or it expires and the sweep (or a late claim) runs
its expiry compensation. Removal under the lock is the first irreversible
step of both paths, so whichever removes the entry first wins.

The registry is process-local; tokens issued by one process are unknown to
every other process.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid4

from adminprefs.domain.clock import Clock, utcnow
from adminprefs.domain.errors import SettingsAccessError, SettingsErrorCode
from adminprefs.domain.rollback.compensation import run_compensation

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from adminprefs.domain.model import SettingsDocument
    from adminprefs.domain.rollback.compensation import Compensation

log = getLogger(__name__)

DEFAULT_ROLLBACK_TTL = timedelta(minutes=5)
ROLLBACK_INVALID_MESSAGE = "Rollback token is invalid or has expired."


def _new_token() -> str:
    return str(uuid4())


@dataclass(frozen=True, slots=True, kw_only=True)
class RollbackEntry:
    token: str
    uid: str
    previous: SettingsDocument
    expires_at: datetime
    previous_auth_email: str | None = None
    previous_email_verified: bool | None = None
    on_rollback: Compensation | None = None
    on_expire: Compensation | None = None

    @property
    def restores_identity(self) -> bool:
        return bool(self.previous_auth_email)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


def rollback_invalid() -> SettingsAccessError:
    return SettingsAccessError(SettingsErrorCode.ROLLBACK_INVALID, ROLLBACK_INVALID_MESSAGE)


class RollbackTokenStore:
    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_ROLLBACK_TTL,
        clock: Clock = utcnow,
        token_factory: Callable[[], str] = _new_token,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._token_factory = token_factory
        self._entries: dict[str, RollbackEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries

    def issue(
        self,
        uid: str,
        previous: SettingsDocument,
        *,
        previous_auth_email: str | None = None,
        previous_email_verified: bool | None = None,
        on_rollback: Compensation | None = None,
        on_expire: Compensation | None = None,
    ) -> str:
        token = self._token_factory()
        entry = RollbackEntry(
            token=token,
            uid=uid,
            previous=previous,
            expires_at=self._clock() + self.ttl,
            previous_auth_email=previous_auth_email,
            previous_email_verified=previous_email_verified,
            on_rollback=on_rollback,
            on_expire=on_expire,
        )
        with self._lock:
            if token in self._entries:
                raise RuntimeError("Rollback token collision")
            self._entries[token] = entry
        log.debug("Issued rollback token for uid=%s (expires %s)", uid, entry.expires_at)
        return token

    def peek(self, token: str) -> RollbackEntry | None:
        with self._lock:
            return self._entries.get(token)

    def claim(self, token: str, *, uid: str | None = None) -> RollbackEntry:
        """Remove and return a live entry.

        Unknown tokens, tokens owned by another uid and expired tokens raise
        ``ROLLBACK_INVALID``. An expired entry is consumed here exactly as the
        sweep would consume it, including its expiry compensation.
        """

        now = self._clock()
        with self._lock:
            entry = self._entries.get(token)
            if entry is None or (uid is not None and entry.uid != uid):
                raise rollback_invalid()
            del self._entries[token]

        if entry.is_expired(now):
            run_compensation(entry.on_expire, context="rollback:expired", uid=entry.uid)
            raise rollback_invalid()
        return entry

    def reinstate(self, entry: RollbackEntry) -> None:
        """Put back an entry whose rollback failed before changing anything."""

        with self._lock:
            self._entries.setdefault(entry.token, entry)

    def sweep(self, now: datetime | None = None) -> int:
        """Expire every lapsed entry and run its expiry compensation."""

        current = now or self._clock()
        with self._lock:
            expired = [entry for entry in self._entries.values() if entry.is_expired(current)]
            for entry in expired:
                del self._entries[entry.token]

        for entry in expired:
            run_compensation(entry.on_expire, context="rollback:sweep", uid=entry.uid)
        if expired:
            log.debug("Swept %s expired rollback token(s)", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

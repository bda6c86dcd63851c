"""Per-principal cooldowns for sensitive flows (email change, re-verification)."""

from __future__ import annotations

from datetime import datetime, timedelta
from logging import getLogger

from adminprefs.domain.clock import Clock, utcnow
from adminprefs.domain.errors import RateLimitExceeded

log = getLogger(__name__)

DEFAULT_COOLDOWN = timedelta(seconds=60)


class CooldownLimiter:
    """Remembers the last successful invocation per uid.

    Entries are never evicted; once the window has passed a stale timestamp
    simply stops blocking.
    """

    def __init__(
        self,
        name: str,
        *,
        message: str,
        window: timedelta = DEFAULT_COOLDOWN,
        clock: Clock = utcnow,
    ) -> None:
        self.name = name
        self.message = message
        self.window = window
        self._clock = clock
        self._last_invocation: dict[str, datetime] = {}

    def ensure_ready(self, uid: str, *, now: datetime | None = None) -> datetime:
        """Raise ``RateLimitExceeded`` inside the window; otherwise return ``now``."""

        current = now or self._clock()
        last = self._last_invocation.get(uid)
        if last is not None and current - last < self.window:
            log.info("Cooldown %s active for uid=%s", self.name, uid)
            raise RateLimitExceeded(self.message)
        return current

    def record(self, uid: str, at: datetime | None = None) -> None:
        self._last_invocation[uid] = at or self._clock()

    def last_invocation(self, uid: str) -> datetime | None:
        return self._last_invocation.get(uid)

"""Background thread that periodically expires rollback tokens."""

from __future__ import annotations

import threading
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adminprefs.domain.rollback.tokens import RollbackTokenStore

log = getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


class ExpirySweeper:
    """Runs ``RollbackTokenStore.sweep`` on a fixed interval in a daemon thread.

    Example:
        >>> sweeper = ExpirySweeper(tokens, interval_seconds=60.0)
        >>> sweeper.start()
        >>> # ... later ...
        >>> sweeper.stop()
    """

    def __init__(
        self,
        tokens: RollbackTokenStore,
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._tokens = tokens
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._sweep_count = 0
        self._last_sweep: datetime | None = None

    def start(self) -> None:
        if self.is_running:
            log.warning("ExpirySweeper already started")
            return

        self._stop_event.clear()

        def _loop() -> None:
            log.info(f"ExpirySweeper started (interval={self._interval}s)")
            while not self._stop_event.wait(self._interval):
                self.run_once()
            log.info("ExpirySweeper stopped")

        self._thread = threading.Thread(target=_loop, daemon=True, name="adminprefs-sweeper")
        self._thread.start()

    def run_once(self) -> int:
        """Sweep immediately; failures are logged so the loop keeps running."""

        try:
            expired = self._tokens.sweep()
        except Exception:
            log.exception("Rollback sweep failed")
            expired = 0
        with self._lock:
            self._sweep_count += 1
            self._last_sweep = datetime.now(UTC)
        return expired

    def stop(self, *, timeout: float = 5.0) -> None:
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            log.warning("Sweeper thread did not stop cleanly")
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def sweep_count(self) -> int:
        return self._sweep_count

    @property
    def last_sweep(self) -> datetime | None:
        return self._last_sweep

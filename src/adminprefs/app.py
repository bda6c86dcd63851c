"""Application composition: configured backends and process-wide rollback state."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from adminprefs.adapters.identity import IdentityToolkitClient
from adminprefs.adapters.mail import build_verification_mailer
from adminprefs.adapters.sqlalchemy import SqlAlchemySettingsStore
from adminprefs.adapters.sqlalchemy import is_started as sqlalchemy_started
from adminprefs.adapters.sqlalchemy import shutdown as sqlalchemy_shutdown
from adminprefs.adapters.sqlalchemy import startup as sqlalchemy_startup
from adminprefs.adapters.storage import LocalObjectStorage
from adminprefs.config import (
    ConfigurationError,
    get_identity_config,
    get_mail_config,
    get_saga_config,
    get_site_config,
)
from adminprefs.domain.rollback import ExpirySweeper, RollbackTokenStore
from adminprefs.domain.settings_service import (
    SettingsService,
    email_change_limiter,
    verification_limiter,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from adminprefs.config import SagaConfig, SiteConfig
    from adminprefs.domain.ports import (
        AdminSession,
        IdentityProvider,
        ObjectStorage,
        SettingsStore,
        VerificationMailer,
    )
    from adminprefs.domain.rate_limit import CooldownLimiter

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Backends:
    """Adapters handed to the settings service; ``None`` marks an unavailable backend."""

    store: SettingsStore | None
    identity: IdentityProvider | None
    storage: ObjectStorage | None
    mailer: VerificationMailer


@dataclass(slots=True)
class _RuntimeState:
    tokens: RollbackTokenStore
    email_cooldown: CooldownLimiter
    verification_cooldown: CooldownLimiter
    sweeper: ExpirySweeper
    closers: list[Callable[[], None]] = field(default_factory=list)


_STATE: _RuntimeState | None = None


def runtime_state(saga: SagaConfig | None = None) -> _RuntimeState:
    """Return the process-wide token store and cooldowns, creating them on first use."""

    global _STATE  # noqa: PLW0603
    if _STATE is None:
        config = saga or get_saga_config()
        tokens = RollbackTokenStore(ttl=config.rollback_ttl)
        _STATE = _RuntimeState(
            tokens=tokens,
            email_cooldown=email_change_limiter(window=config.cooldown),
            verification_cooldown=verification_limiter(window=config.cooldown),
            sweeper=ExpirySweeper(tokens, interval_seconds=config.sweep_interval_seconds),
        )
    return _STATE


def start_rollback_sweeper(saga: SagaConfig | None = None) -> ExpirySweeper:
    sweeper = runtime_state(saga).sweeper
    sweeper.start()
    return sweeper


def shutdown_runtime() -> None:
    """Stop the sweeper, drop pending tokens and release open clients and the engine."""

    global _STATE  # noqa: PLW0603
    if _STATE is not None:
        _STATE.sweeper.stop()
        for close in reversed(_STATE.closers):
            close()
        _STATE.tokens.clear()
        _STATE = None
    if sqlalchemy_started():
        sqlalchemy_shutdown()


def _configure_store() -> SettingsStore | None:
    try:
        if not sqlalchemy_started():
            sqlalchemy_startup()
    except (ConfigurationError, SQLAlchemyError):
        log.exception("Settings store could not be started")
        return None
    return SqlAlchemySettingsStore()


def _configure_identity(saga: SagaConfig) -> IdentityProvider | None:
    try:
        client = IdentityToolkitClient(config=get_identity_config())
    except ConfigurationError as exc:
        log.warning("Identity provider not configured: %s", exc)
        return None
    runtime_state(saga).closers.append(client.close)
    return client


def configure_backends(saga: SagaConfig | None = None) -> Backends:
    """Build adapters from the environment.

    In read-only mode no backend is started; the service rejects every access.
    """

    config = saga or get_saga_config()
    mailer = build_verification_mailer(get_mail_config())
    if config.read_only:
        log.info("Admin settings running in read-only mode")
        return Backends(store=None, identity=None, storage=None, mailer=mailer)
    return Backends(
        store=_configure_store(),
        identity=_configure_identity(config),
        storage=LocalObjectStorage.from_config(),
        mailer=mailer,
    )


def build_settings_service(
    session: AdminSession,
    backends: Backends | None = None,
    *,
    saga: SagaConfig | None = None,
    site: SiteConfig | None = None,
) -> SettingsService:
    """Create a ``SettingsService`` sharing the process-wide tokens and cooldowns."""

    config = saga or get_saga_config()
    resolved = backends or configure_backends(config)
    state = runtime_state(config)
    return SettingsService(
        session=session,
        store=resolved.store,
        identity=resolved.identity,
        storage=resolved.storage,
        mailer=resolved.mailer,
        tokens=state.tokens,
        email_cooldown=state.email_cooldown,
        verification_cooldown=state.verification_cooldown,
        site_name=(site or get_site_config()).name,
        read_only=config.read_only,
    )

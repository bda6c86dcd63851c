from __future__ import annotations

import pytest

from adminprefs.domain.errors import (
    RateLimitExceeded,
    ReauthenticationRequired,
    SettingsAccessError,
    SettingsErrorCode,
)
from adminprefs.domain.ports.identity import IdentityRecord
from tests.helpers.settings import (
    ADMIN_EMAIL,
    ADMIN_UID,
    VALID_TOKEN,
    RecordingMailer,
    ServiceHarness,
    make_service,
)

NEW_EMAIL = "new-admin@example.com"


def _unconfigured_transport() -> SettingsAccessError:
    return SettingsAccessError(
        SettingsErrorCode.EMAIL_TRANSPORT_UNCONFIGURED, "Email transport is not configured."
    )


def test_change_email_updates_identity_and_document(harness: ServiceHarness) -> None:
    harness.service.load_settings()

    mutation = harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert harness.identity.users[ADMIN_UID] == IdentityRecord(
        uid=ADMIN_UID, email=NEW_EMAIL, email_verified=False
    )
    assert mutation.settings.profile.email == NEW_EMAIL
    assert mutation.settings.profile.display_name == NEW_EMAIL
    [message] = harness.mailer.sent
    assert message.recipient == NEW_EMAIL
    assert message.subject == "Example Admin - Confirm your new email address"
    assert message.heading == "Confirm your new email address"
    assert "Example Admin admin account" in message.intro
    assert NEW_EMAIL in message.link


def test_change_email_rollback_restores_identity(harness: ServiceHarness) -> None:
    before = harness.service.load_settings()
    mutation = harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    restored = harness.service.rollback_settings(mutation.rollback_token)

    assert restored == before
    assert harness.identity.users[ADMIN_UID] == IdentityRecord(
        uid=ADMIN_UID, email=ADMIN_EMAIL, email_verified=True
    )
    assert harness.identity.updates[-1] == (ADMIN_UID, ADMIN_EMAIL, True)


def test_change_email_compensates_identity_when_mail_fails() -> None:
    harness = make_service(mailer=RecordingMailer(error=_unconfigured_transport()))
    before = harness.service.load_settings()

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert exc.value.code is SettingsErrorCode.EMAIL_TRANSPORT_UNCONFIGURED
    assert harness.identity.updates == [
        (ADMIN_UID, NEW_EMAIL, False),
        (ADMIN_UID, ADMIN_EMAIL, True),
    ]
    assert harness.store.documents[ADMIN_UID] == before
    assert len(harness.tokens) == 0
    # A failed attempt does not start the cooldown.
    assert harness.email_cooldown.last_invocation(ADMIN_UID) is None


def test_change_email_failure_without_previous_address_restores_verified_flag() -> None:
    harness = make_service(mailer=RecordingMailer(error=_unconfigured_transport()))
    harness.identity.users[ADMIN_UID] = IdentityRecord(
        uid=ADMIN_UID, email=None, email_verified=True
    )

    with pytest.raises(SettingsAccessError):
        harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert harness.identity.updates == [
        (ADMIN_UID, NEW_EMAIL, False),
        (ADMIN_UID, NEW_EMAIL, True),
    ]


def test_change_email_compensates_identity_when_document_write_fails(
    harness: ServiceHarness,
) -> None:
    harness.service.load_settings()
    harness.store.fail_writes = True

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert exc.value.code is SettingsErrorCode.FIRESTORE_ERROR
    assert harness.identity.users[ADMIN_UID].email == ADMIN_EMAIL
    assert harness.identity.users[ADMIN_UID].email_verified is True
    assert len(harness.tokens) == 0


def test_change_email_requires_matching_reauthentication(harness: ServiceHarness) -> None:
    harness.identity.tokens["other-token"] = "someone-else"

    with pytest.raises(ReauthenticationRequired, match="Reauthentication required"):
        harness.service.change_email(NEW_EMAIL, "unknown-token")
    with pytest.raises(ReauthenticationRequired):
        harness.service.change_email(NEW_EMAIL, "other-token")

    assert harness.identity.updates == []
    assert harness.mailer.sent == []


def test_change_email_is_rate_limited(harness: ServiceHarness) -> None:
    harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    identity_calls = list(harness.identity.calls)
    sent = list(harness.mailer.sent)
    documents = dict(harness.store.documents)

    harness.clock.advance(seconds=30)
    with pytest.raises(RateLimitExceeded, match="Email change is temporarily rate limited"):
        harness.service.change_email("third@example.com", VALID_TOKEN)

    assert harness.identity.calls == identity_calls
    assert harness.mailer.sent == sent
    assert harness.store.documents == documents

    harness.clock.advance(seconds=30)
    mutation = harness.service.change_email("third@example.com", VALID_TOKEN)
    assert mutation.settings.profile.email == "third@example.com"


def test_change_email_without_store_leaves_identity_untouched() -> None:
    harness = make_service(store=None)

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert exc.value.code is SettingsErrorCode.ADMIN_SDK_UNAVAILABLE
    assert harness.identity.updates == []


def test_change_email_without_identity_provider() -> None:
    harness = make_service(identity=None)

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert exc.value.code is SettingsErrorCode.ADMIN_SDK_UNAVAILABLE


def test_send_email_verification_sends_and_rate_limits(harness: ServiceHarness) -> None:
    result = harness.service.send_email_verification(ADMIN_EMAIL)

    assert result.ok is True
    [message] = harness.mailer.sent
    assert message.subject == "Example Admin - Verify your email address"
    assert message.intro == "Confirm your email to secure your Example Admin admin account."

    with pytest.raises(RateLimitExceeded, match="Verification already requested recently"):
        harness.service.send_email_verification(ADMIN_EMAIL)

    harness.clock.advance(seconds=60)
    assert harness.service.send_email_verification(ADMIN_EMAIL).ok is True


def test_send_email_verification_failure_does_not_start_cooldown() -> None:
    harness = make_service(mailer=RecordingMailer(error=_unconfigured_transport()))

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.send_email_verification(ADMIN_EMAIL)

    assert exc.value.code is SettingsErrorCode.EMAIL_TRANSPORT_UNCONFIGURED
    assert harness.verification_cooldown.last_invocation(ADMIN_UID) is None


def test_email_change_and_verification_cooldowns_are_independent(
    harness: ServiceHarness,
) -> None:
    harness.service.change_email(NEW_EMAIL, VALID_TOKEN)

    assert harness.service.send_email_verification(NEW_EMAIL).ok is True


def test_failed_identity_restore_on_rollback_is_reported(harness: ServiceHarness) -> None:
    before = harness.service.load_settings()
    mutation = harness.service.change_email(NEW_EMAIL, VALID_TOKEN)
    harness.identity.fail_updates = True

    with pytest.raises(SettingsAccessError) as exc:
        harness.service.rollback_settings(mutation.rollback_token)

    assert exc.value.code is SettingsErrorCode.ADMIN_SDK_UNAVAILABLE
    assert isinstance(exc.value.__cause__, RuntimeError)
    assert harness.store.documents[ADMIN_UID] == before
    assert mutation.rollback_token not in harness.tokens


def test_undo_compensation_runs_when_identity_restore_fails(harness: ServiceHarness) -> None:
    before = harness.service.load_settings()
    undone: list[str] = []
    token = harness.tokens.issue(
        ADMIN_UID,
        before,
        previous_auth_email=ADMIN_EMAIL,
        previous_email_verified=True,
        on_rollback=lambda: undone.append("on_rollback"),
    )
    harness.identity.fail_updates = True

    with pytest.raises(SettingsAccessError):
        harness.service.rollback_settings(token)

    assert undone == ["on_rollback"]

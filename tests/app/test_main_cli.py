from __future__ import annotations

import json
from dataclasses import dataclass, field

import pytest

from adminprefs import main as main_module
from adminprefs.adapters.session import StaticAdminSession
from adminprefs.domain.errors import SettingsAccessError, SettingsErrorCode
from adminprefs.domain.settings_service import SettingsService
from tests.helpers.settings import ADMIN_UID, ServiceHarness, make_service


@dataclass
class CliContext:
    harness: ServiceHarness
    requested_uids: list[str | None] = field(default_factory=list)


@pytest.fixture
def cli(monkeypatch: pytest.MonkeyPatch) -> CliContext:
    context = CliContext(harness=make_service())

    def fake_build(session: StaticAdminSession) -> SettingsService:
        context.requested_uids.append(session())
        return context.harness.service

    monkeypatch.setattr(main_module, "build_settings_service", fake_build)
    monkeypatch.setattr(main_module, "shutdown_runtime", lambda: None)
    return context


def test_show_prints_stored_document(
    cli: CliContext, capsys: pytest.CaptureFixture[str]
) -> None:
    main_module.main(["show", "--uid", ADMIN_UID])

    payload = json.loads(capsys.readouterr().out)
    assert payload["appearance"]["theme"] == "system"
    assert payload["notifications"]["inApp"] == {"enabled": True}
    assert cli.requested_uids == [ADMIN_UID]


def test_reset_appearance_prints_rollback_token(
    cli: CliContext, capsys: pytest.CaptureFixture[str]
) -> None:
    main_module.main(["reset-appearance", "--uid", ADMIN_UID])

    out = capsys.readouterr().out
    token = out.rsplit(":", 1)[1].strip()
    assert token in cli.harness.tokens
    assert cli.harness.store.documents[ADMIN_UID].appearance.theme == "system"


def test_send_verification_mails_address(
    cli: CliContext, capsys: pytest.CaptureFixture[str]
) -> None:
    main_module.main(["send-verification", "--uid", ADMIN_UID, "--email", "a@example.com"])

    assert "a@example.com" in capsys.readouterr().out
    assert [message.recipient for message in cli.harness.mailer.sent] == ["a@example.com"]


def test_validation_errors_exit_with_2(
    cli: CliContext, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc:
        main_module.main(["send-verification", "--uid", ADMIN_UID, "--email", "nope"])

    assert exc.value.code == 2
    assert "Error:" in capsys.readouterr().err
    assert cli.harness.mailer.sent == []


def test_backend_failures_exit_with_1(
    cli: CliContext, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.harness.mailer.error = SettingsAccessError(
        SettingsErrorCode.EMAIL_TRANSPORT_UNCONFIGURED, "Email transport is not configured."
    )

    with pytest.raises(SystemExit) as exc:
        main_module.main(["send-verification", "--uid", ADMIN_UID, "--email", "a@example.com"])

    assert exc.value.code == 1
    assert "EMAIL_TRANSPORT_UNCONFIGURED" in capsys.readouterr().err


def test_missing_command_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as exc:
        main_module.main([])

    assert exc.value.code == 2

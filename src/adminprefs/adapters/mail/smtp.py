"""Verification mailers: SMTP delivery plus test-mode and unconfigured stand-ins."""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from html import escape
from logging import getLogger
from typing import TYPE_CHECKING

from adminprefs.domain.errors import SettingsAccessError, SettingsErrorCode
from adminprefs.domain.ports.mail import VerificationMailer, VerificationMessage

if TYPE_CHECKING:
    from adminprefs.config.mail import MailConfig, SmtpConfig

log = getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 10.0


def render_text(message: VerificationMessage) -> str:
    return (
        f"{message.heading}\n\n"
        f"{message.intro}\n\n"
        f"{message.link}\n\n"
        "If you did not request this, you can ignore this email.\n"
    )


def render_html(message: VerificationMessage) -> str:
    link = escape(message.link, quote=True)
    return (
        "<!doctype html>\n"
        '<html><body style="font-family: sans-serif; line-height: 1.5;">\n'
        f"<h1 style=\"font-size: 20px;\">{escape(message.heading)}</h1>\n"
        f"<p>{escape(message.intro)}</p>\n"
        f'<p><a href="{link}">{escape(message.heading)}</a></p>\n'
        f'<p style="color: #6b7280; font-size: 12px;">{link}</p>\n'
        "</body></html>\n"
    )


class SmtpVerificationMailer:
    """Sends verification messages through an SMTP relay."""

    def __init__(self, config: SmtpConfig) -> None:
        self.config = config

    def build_message(self, message: VerificationMessage) -> EmailMessage:
        email = EmailMessage()
        email["Subject"] = message.subject
        email["From"] = self.config.from_address
        email["To"] = message.recipient
        email.set_content(render_text(message))
        email.add_alternative(render_html(message), subtype="html")
        return email

    def send(self, message: VerificationMessage) -> None:
        email = self.build_message(message)
        config = self.config
        if config.secure:
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                config.host, config.port, timeout=SMTP_TIMEOUT_SECONDS
            )
        else:
            server = smtplib.SMTP(config.host, config.port, timeout=SMTP_TIMEOUT_SECONDS)
        with server:
            if not config.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            if config.user and config.password:
                server.login(config.user, config.password)
            server.send_message(email)
        log.info("Sent verification email to %s", message.recipient)


class NullVerificationMailer:
    """Drops messages; used in test and demo mode."""

    def __init__(self) -> None:
        self.dropped = 0

    def send(self, message: VerificationMessage) -> None:
        log.info("Test mode: skipping verification email to %s", message.recipient)
        self.dropped += 1


class UnconfiguredVerificationMailer:
    """Fails every send so callers can compensate earlier side effects."""

    def send(self, message: VerificationMessage) -> None:
        log.error("Email transport not configured; cannot mail %s", message.recipient)
        raise SettingsAccessError(
            SettingsErrorCode.EMAIL_TRANSPORT_UNCONFIGURED,
            "Email transport is not configured. Set SMTP_HOST, SMTP_USER and SMTP_PASS.",
        )


def build_verification_mailer(config: MailConfig) -> VerificationMailer:
    if config.test_mode:
        return NullVerificationMailer()
    if config.smtp is None:
        return UnconfiguredVerificationMailer()
    return SmtpVerificationMailer(config.smtp)


if TYPE_CHECKING:
    _smtp_check: VerificationMailer = SmtpVerificationMailer(SmtpConfig(host="", from_address=""))
    _null_check: VerificationMailer = NullVerificationMailer()
    _unconfigured_check: VerificationMailer = UnconfiguredVerificationMailer()

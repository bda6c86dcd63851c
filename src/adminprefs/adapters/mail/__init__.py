"""Verification mail adapters."""

from __future__ import annotations

from .smtp import (
    NullVerificationMailer,
    SmtpVerificationMailer,
    UnconfiguredVerificationMailer,
    build_verification_mailer,
)

__all__ = [
    "NullVerificationMailer",
    "SmtpVerificationMailer",
    "UnconfiguredVerificationMailer",
    "build_verification_mailer",
]

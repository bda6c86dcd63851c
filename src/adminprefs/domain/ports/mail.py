"""Port for delivering verification emails."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class VerificationMessage:
    recipient: str
    link: str
    subject: str
    heading: str
    intro: str


@runtime_checkable
class VerificationMailer(Protocol):
    def send(self, message: VerificationMessage) -> None: ...

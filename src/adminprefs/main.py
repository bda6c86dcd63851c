#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from adminprefs.adapters.session import StaticAdminSession
from adminprefs.adapters.sqlalchemy.translator import dump_settings_document
from adminprefs.app import build_settings_service, shutdown_runtime
from adminprefs.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from adminprefs.domain.settings_service import SettingsService


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and manage admin settings")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print the settings document of an admin")
    show.add_argument("--uid", required=True, help="Admin user id")

    reset = subparsers.add_parser(
        "reset-appearance", help="Restore the default appearance settings"
    )
    reset.add_argument("--uid", required=True, help="Admin user id")

    verify = subparsers.add_parser(
        "send-verification", help="Send an email verification link"
    )
    verify.add_argument("--uid", required=True, help="Admin user id")
    verify.add_argument("--email", required=True, help="Address to verify")

    return parser.parse_args(list(argv))


def _run_command(service: SettingsService, args: argparse.Namespace) -> None:
    if args.command == "show":
        document = service.load_settings()
        print(json.dumps(dump_settings_document(document), indent=2, sort_keys=True))
    elif args.command == "reset-appearance":
        mutation = service.reset_appearance()
        print(f"Appearance reset. Rollback token: {mutation.rollback_token}")
    elif args.command == "send-verification":
        service.send_email_verification(args.email)
        print(f"Verification email sent to {args.email}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(argv if argv is not None else sys.argv[1:])

    try:
        service = build_settings_service(StaticAdminSession(parsed_args.uid))
        _run_command(service, parsed_args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        shutdown_runtime()


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    configure_logging()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

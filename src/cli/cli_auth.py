from __future__ import annotations

import argparse

from rich.text import Text

from auth import AuthHealthStatus, check
from env import get_logging_env


def build_auth_parser(subparsers: argparse._SubParsersAction) -> None:
    auth = subparsers.add_parser(
        "auth",
        help="Check that the Spotify refresh token still works",
    )
    auth.add_argument("--verbose", action="store_true", help="Verbose console output")
    auth.add_argument("--quiet", action="store_true", help="Suppress console output")
    auth.add_argument(
        "--provider",
        default="spotify",
        help="Auth provider to check (default: spotify)",
    )


def handle_auth(args: argparse.Namespace) -> int:
    from logger.console import CONSOLE

    result = check(args.provider)
    quiet = get_logging_env().quiet

    if result.status == AuthHealthStatus.OK:
        if not quiet:
            CONSOLE.print(Text(result.message, style="green"))
        return 0

    if not quiet:
        CONSOLE.print(Text(result.message, style="red"))
    return 2

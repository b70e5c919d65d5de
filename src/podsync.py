#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from bootstrap import bootstrap_base_env, bootstrap_run_context


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="podsync",
        description="Keep a Spotify playlist stocked with the newest podcast episodes.",
    )

    sub = p.add_subparsers(dest="command", required=True)

    # Keep imports inside builder to avoid early side effects.
    from cli.cli_auth import build_auth_parser
    from cli.cli_env import build_env_parser
    from cli.cli_sync import build_sync_parser

    build_sync_parser(sub)
    build_auth_parser(sub)
    build_env_parser(sub)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    bootstrap_base_env()

    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    # Stamp run context before logging so the log file lands in the right place
    bootstrap_run_context(
        command=args.command,
        profile_name=getattr(args, "profile", None),
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
        dry_run=bool(getattr(args, "dry_run", False)),
    )

    from logger import LogContext, get_logger, init_logging

    logfile = init_logging(LogContext.from_env())
    log = get_logger("podsync")
    log.debug("podsync starting (command=%s, log=%s)", args.command, logfile)

    if args.command == "sync":
        from cli.cli_sync import handle_sync

        return handle_sync(args)

    if args.command == "auth":
        from cli.cli_auth import handle_auth

        return handle_auth(args)

    if args.command == "env":
        from cli.cli_env import handle_env

        return handle_env(args)

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())

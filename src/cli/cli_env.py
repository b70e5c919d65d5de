from __future__ import annotations

import argparse
from typing import Any, Dict

from rich.table import Table
from rich.text import Text

from env import get_env
from errors import PodsyncError


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Inspect the resolved configuration")
    sub = env.add_subparsers(dest="env_cmd", required=True)

    sub.add_parser(
        "dump", help="Show the resolved environment (secrets redacted)"
    ).set_defaults(action="dump")
    sub.add_parser(
        "check", help="Validate sync settings without calling Spotify"
    ).set_defaults(action="check")


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "dump":
        return handle_env_dump()
    if args.action == "check":
        return handle_env_check()

    raise RuntimeError(f"Unknown env action: {args.action}")


def _key_value_table(title: str, values: Dict[str, Any]) -> Table:
    table = Table(title=title, title_justify="left", show_header=False, box=None)
    table.add_column(style="cyan", no_wrap=True)
    table.add_column()
    for key, value in values.items():
        # Text keeps values like "[x]" from being read as markup
        table.add_row(key, Text(str(value)))
    return table


def handle_env_dump() -> int:
    from logger.console import CONSOLE

    for section, values in get_env().as_dict().items():
        CONSOLE.print(_key_value_table(section, values))
        CONSOLE.print()
    return 0


def handle_env_check() -> int:
    from logger.console import CONSOLE

    try:
        settings = get_env().sync_settings()
    except PodsyncError as e:
        CONSOLE.print(Text(f"Config error: {e.message}", style="red"))
        return e.kind.exit_code

    policy = settings.policy
    CONSOLE.print(
        Text(
            f"OK - playlist {settings.playlist_id}, {len(settings.shows)} show(s)"
            + (", dry run" if settings.dry_run else ""),
            style="green",
        )
    )
    CONSOLE.print(
        _key_value_table(
            "Retention",
            {
                "max_age_days": policy.max_age_days,
                "max_per_show": policy.max_per_show,
                "new_episodes_per_show": policy.new_episodes_per_show_limit,
            },
        )
    )
    CONSOLE.print(
        _key_value_table("Shows", {s.show_id: s.display_name or "-" for s in settings.shows})
    )
    return 0

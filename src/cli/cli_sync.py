from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from env import profiles_dir, reset_env_caches
from errors import PodsyncError, config_error
from pipeline.models import ShowConfig

# profile "rules" key -> environment variable
_RULE_ENV = {
    "max_age_days": "PODSYNC_MAX_AGE_DAYS",
    "max_per_show": "PODSYNC_MAX_PER_SHOW",
    "new_episodes_per_show": "PODSYNC_NEW_EPISODES_PER_SHOW",
}


# ------------------------------------------------------------
# Profiles
# ------------------------------------------------------------


@dataclass(frozen=True)
class Profile:
    name: str
    profile_path: Path
    playlist_id: str
    shows: List[ShowConfig]
    rules: Dict[str, Any] = field(default_factory=dict)


def _parse_shows(name: str, raw: Any) -> List[ShowConfig]:
    if not isinstance(raw, list):
        raise config_error(f"Profile {name}: 'shows' must be a list")

    shows: List[ShowConfig] = []
    for item in raw:
        if isinstance(item, str):
            shows.append(ShowConfig(show_id=item.strip()))
        elif isinstance(item, dict) and item.get("id"):
            shows.append(
                ShowConfig(
                    show_id=str(item["id"]).strip(),
                    display_name=str(item.get("name") or "").strip(),
                )
            )
        else:
            raise config_error(f"Profile {name}: invalid show entry {item!r}")
    return shows


def load_profile(name: str) -> Profile:
    profile_path = profiles_dir() / f"{name}.json"
    if not profile_path.exists():
        raise config_error(f"Missing profile JSON: {profile_path}")

    try:
        data = json.loads(profile_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise config_error(f"{profile_path.name}: invalid JSON ({e})") from e

    playlist_id = str(data.get("playlist_id") or "").strip()
    if not playlist_id:
        raise config_error(f"Profile {name} missing required field: playlist_id")

    rules = data.get("rules") or {}
    unknown = sorted(set(rules) - set(_RULE_ENV))
    if unknown:
        raise config_error(f"Profile {name}: unknown rules {', '.join(unknown)}")

    return Profile(
        name=name,
        profile_path=profile_path,
        playlist_id=playlist_id,
        shows=_parse_shows(name, data.get("shows") or []),
        rules=rules,
    )


def apply_profile(profile: Profile) -> None:
    """Profiles are applied by seeding the environment, then invalidating caches."""
    os.environ["SPOTIFY_PLAYLIST_ID"] = profile.playlist_id
    if profile.shows:
        os.environ["SPOTIFY_SHOW_IDS"] = ",".join(
            f"{s.show_id}={s.display_name.replace(',', ' ')}" if s.display_name else s.show_id
            for s in profile.shows
        )
        os.environ.pop("PODSYNC_SHOWS_CSV", None)
    for key, value in profile.rules.items():
        os.environ[_RULE_ENV[key]] = str(value)

    reset_env_caches()


# ------------------------------------------------------------
# Parser
# ------------------------------------------------------------


def build_sync_parser(subparsers: argparse._SubParsersAction) -> None:
    sync = subparsers.add_parser(
        "sync", help="Add new episodes and apply retention to the playlist"
    )

    sync.add_argument("--profile", help="Profile name (profiles/<name>.json)")
    sync.add_argument(
        "--dry-run", action="store_true", help="Decide, but do not modify the playlist"
    )
    sync.add_argument(
        "--json", action="store_true", help="Print the job outcome as JSON"
    )
    sync.add_argument("--verbose", action="store_true")
    sync.add_argument("--quiet", action="store_true")


# ------------------------------------------------------------
# Handler
# ------------------------------------------------------------


def handle_sync(args: argparse.Namespace) -> int:
    from logger import get_logger
    from logger.console import CONSOLE
    from runner import run_once

    log = get_logger("podsync")

    if args.profile:
        try:
            profile = load_profile(args.profile)
        except PodsyncError as e:
            log.error("Profile error: %s", e.message)
            return e.kind.exit_code
        apply_profile(profile)
        log.info("Profile: %s (%s)", profile.name, profile.profile_path)

    outcome = run_once()

    if args.json:
        CONSOLE.print_json(json.dumps(outcome.as_dict()))

    if outcome.success:
        log.info("Done: OK (%d new episode(s))", outcome.new_episodes_added)
        return 0

    assert outcome.error_kind is not None
    log.error("Done: failed (%s)", outcome.error_kind.value)
    return outcome.error_kind.exit_code

from __future__ import annotations

import csv
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import config
from errors import PodsyncError, config_error
from pipeline.models import RetentionPolicy, ShowConfig

# Kept as a name so callers can `except ConfigError`; the kind lives on the error.
ConfigError = PodsyncError


# ------------------------------------------------------------
# Minimal dotenv loader (read-only helper, bootstrap owns usage)
# ------------------------------------------------------------


def _load_dotenv(path: Path) -> None:
    """
    Minimal dotenv loader.
    - Silent
    - Never overrides existing os.environ
    """
    if not path.exists():
        return

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        if line.startswith("export "):
            line = line[len("export ") :].lstrip()

        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip()

        if " #" in v:
            v = v.split(" #", 1)[0].rstrip()

        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]

        if k and k not in os.environ:
            os.environ[k] = v


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------


def _require(name: str) -> str:
    v = os.environ.get(name, "").strip()
    if not v:
        raise config_error(f"Missing required environment variable: {name}")
    return v


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


def _as_float(v: str, default: float) -> float:
    try:
        return float(v)
    except Exception:
        return default


def _strict_int(name: str, default: int) -> int:
    """Like _as_int, but a value that is present and unparseable is an error."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise config_error(f"{name} must be an integer, got {raw!r}") from None


def parse_show_list(raw: str) -> List[ShowConfig]:
    """
    Parse ``id`` or ``id=Display Name`` entries separated by commas.
    Duplicates keep their first position.
    """
    shows: List[ShowConfig] = []
    seen: set[str] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        show_id, _, name = part.partition("=")
        show_id = show_id.strip()
        if not show_id or show_id in seen:
            continue
        seen.add(show_id)
        shows.append(ShowConfig(show_id=show_id, display_name=name.strip()))
    return shows


def load_shows_csv(path: Path) -> List[ShowConfig]:
    """
    Read a ``show_id,name`` CSV. A header row is optional.
    """
    if not path.exists():
        raise config_error(f"Shows CSV not found: {path}")

    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise config_error(f"Cannot read shows CSV {path}: {e}") from e

    shows: List[ShowConfig] = []
    seen: set[str] = set()
    for row in rows:
        if not row:
            continue
        show_id = (row[0] or "").strip()
        if not show_id or show_id.lower() in ("show_id", "id"):
            continue
        if show_id in seen:
            continue
        seen.add(show_id)
        name = (row[1] if len(row) > 1 else "").strip()
        shows.append(ShowConfig(show_id=show_id, display_name=name))
    return shows


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_retention: int
    verbose: bool
    quiet: bool
    command: str = "bootstrap"
    profile: Optional[str] = None
    run_id: Optional[str] = None


def get_logging_env() -> LoggingEnvironment:
    return LoggingEnvironment(
        command=os.environ.get("PODSYNC_COMMAND") or "bootstrap",
        profile=os.environ.get("PODSYNC_PROFILE_NAME") or None,
        run_id=os.environ.get("PODSYNC_RUN_ID") or None,
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_retention=_as_int(os.environ.get("LOG_RETENTION", "30"), 30),
        verbose=_as_bool(os.environ.get("PODSYNC_VERBOSE", "0")),
        quiet=_as_bool(os.environ.get("PODSYNC_QUIET", "0")),
    )


# ------------------------------------------------------------
# Validated sync settings
# ------------------------------------------------------------


@dataclass(frozen=True)
class SyncSettings:
    playlist_id: str
    shows: Tuple[ShowConfig, ...]
    policy: RetentionPolicy
    dry_run: bool = False
    discovery_workers: int = config.DEFAULT_DISCOVERY_WORKERS


# ------------------------------------------------------------
# Full runtime environment
# ------------------------------------------------------------


class Environment:
    """
    Snapshot of os.environ for one run.

    Construction never raises; validation happens in sync_settings() and
    credentials() so config errors surface as run outcomes, not import errors.
    """

    def __init__(self):
        self._logging = get_logging_env()

        # ---- CREDENTIALS ----
        self.client_id = os.environ.get("SPOTIFY_CLIENT_ID", "").strip()
        self.client_secret = os.environ.get("SPOTIFY_CLIENT_SECRET", "").strip()
        self.refresh_token = os.environ.get("SPOTIFY_REFRESH_TOKEN", "").strip()
        self.market = os.environ.get("SPOTIFY_MARKET", "").strip() or None

        # ---- SYNC TARGET ----
        self.playlist_id = os.environ.get("SPOTIFY_PLAYLIST_ID", "").strip()
        self.show_ids_raw = os.environ.get("SPOTIFY_SHOW_IDS", "")
        self.shows_csv = os.environ.get("PODSYNC_SHOWS_CSV", "").strip()

        # ---- TRANSPORT ----
        self.request_timeout = _as_int(
            os.environ.get("PODSYNC_REQUEST_TIMEOUT", ""),
            config.DEFAULT_REQUEST_TIMEOUT_SEC,
        )
        self.max_retries = max(
            1,
            _as_int(
                os.environ.get("PODSYNC_MAX_RETRIES", ""), config.DEFAULT_MAX_RETRIES
            ),
        )
        self.backoff_base_sec = _as_float(
            os.environ.get("PODSYNC_BACKOFF_BASE_SEC", ""),
            config.DEFAULT_BACKOFF_BASE_SEC,
        )
        self.discovery_workers = max(
            1,
            _as_int(
                os.environ.get("PODSYNC_DISCOVERY_WORKERS", ""),
                config.DEFAULT_DISCOVERY_WORKERS,
            ),
        )

        # ---- RUN CONTEXT ----
        self.command = os.environ.get("PODSYNC_COMMAND", "bootstrap")
        self.profile_name = os.environ.get("PODSYNC_PROFILE_NAME") or None
        self.dry_run = _as_bool(os.environ.get("PODSYNC_DRY_RUN", "0"))

    # ---- validation ----

    def credentials(self) -> Tuple[str, str, str]:
        return (
            _require("SPOTIFY_CLIENT_ID"),
            _require("SPOTIFY_CLIENT_SECRET"),
            _require("SPOTIFY_REFRESH_TOKEN"),
        )

    def shows(self) -> List[ShowConfig]:
        if self.shows_csv:
            return load_shows_csv(Path(self.shows_csv).expanduser())
        return parse_show_list(self.show_ids_raw)

    def retention_policy(self) -> RetentionPolicy:
        return RetentionPolicy(
            max_age_days=_strict_int(
                "PODSYNC_MAX_AGE_DAYS", config.DEFAULT_MAX_AGE_DAYS
            ),
            max_per_show=_strict_int(
                "PODSYNC_MAX_PER_SHOW", config.DEFAULT_MAX_PER_SHOW
            ),
            new_episodes_per_show_limit=_strict_int(
                "PODSYNC_NEW_EPISODES_PER_SHOW", config.DEFAULT_NEW_EPISODES_PER_SHOW
            ),
        )

    def sync_settings(self) -> SyncSettings:
        playlist_id = _require("SPOTIFY_PLAYLIST_ID")
        if not config.SPOTIFY_ID_RE.match(playlist_id):
            raise config_error(f"Invalid playlist ID: {playlist_id}")

        shows = self.shows()
        if not shows:
            raise config_error(
                "No shows configured (set SPOTIFY_SHOW_IDS or PODSYNC_SHOWS_CSV)"
            )

        return SyncSettings(
            playlist_id=playlist_id,
            shows=tuple(shows),
            policy=self.retention_policy(),
            dry_run=self.dry_run,
            discovery_workers=self.discovery_workers,
        )

    def as_dict(self) -> dict:
        def _secret(v: str) -> str:
            return "set" if v else "missing"

        return {
            "Logging": {
                "log_level": self.log_level,
                "log_retention": self.log_retention,
                "verbose": self.verbose,
                "quiet": self.quiet,
            },
            "Spotify": {
                "client_id": _secret(self.client_id),
                "client_secret": _secret(self.client_secret),
                "refresh_token": _secret(self.refresh_token),
                "market": self.market or "(account default)",
            },
            "Sync": {
                "command": self.command,
                "profile_name": self.profile_name,
                "playlist_id": self.playlist_id,
                "shows_csv": self.shows_csv,
                "show_ids": self.show_ids_raw,
                "dry_run": self.dry_run,
            },
            "Transport": {
                "request_timeout": self.request_timeout,
                "max_retries": self.max_retries,
                "backoff_base_sec": self.backoff_base_sec,
                "discovery_workers": self.discovery_workers,
            },
        }

    # ---- logging passthrough ----
    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_retention(self) -> int:
        return self._logging.log_retention

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV

"""bootstrap.py

Process bootstrap for podsync.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything else treats environment variables as the source of truth.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from env import _load_dotenv, reset_env_caches
from env.paths import dotenv_file

_BOOTSTRAPPED = False


def bootstrap_base_env(dotenv_path: Optional[Path] = None) -> None:
    """
    Load config/.env (if present) without overriding real environment
    variables, and stamp a run id.
    """
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    _load_dotenv(dotenv_path or dotenv_file())

    os.environ.setdefault(
        "PODSYNC_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    profile_name: str | None = None,
    verbose: bool | None = None,
    quiet: bool | None = None,
    dry_run: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging + the sync pipeline."""

    os.environ["PODSYNC_COMMAND"] = command

    if profile_name:
        os.environ["PODSYNC_PROFILE_NAME"] = profile_name
    else:
        os.environ.pop("PODSYNC_PROFILE_NAME", None)

    if verbose is not None:
        os.environ["PODSYNC_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["PODSYNC_QUIET"] = "1" if quiet else "0"
    # only ever switch dry-run on from the CLI; an env-level setting stays
    if dry_run:
        os.environ["PODSYNC_DRY_RUN"] = "1"

    # Context changes must invalidate cached env views.
    reset_env_caches()

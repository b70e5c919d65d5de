from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------
# Project root
# ---------------------------------------------------------------------

# This file lives in src/env/, so project root is two levels up
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------
# Base directories (override-friendly, resolved at call time)
# ---------------------------------------------------------------------


def _resolve_dir(env_var: str, default: Path) -> Path:
    """
    Resolve a directory path from an environment variable or default.
    Ensures the directory exists.
    """
    raw = os.environ.get(env_var)
    path = Path(raw).expanduser().resolve() if raw else default
    path.mkdir(parents=True, exist_ok=True)
    return path


def logs_dir() -> Path:
    return _resolve_dir("PODSYNC_LOGS_DIR", PROJECT_ROOT / "logs")


def profiles_dir() -> Path:
    return _resolve_dir("PODSYNC_PROFILES_DIR", PROJECT_ROOT / "profiles")


def dotenv_file() -> Path:
    return PROJECT_ROOT / "config" / ".env"


# ---------------------------------------------------------------------
# Log layout helpers
# ---------------------------------------------------------------------


def module_logs_dir(command: str) -> Path:
    """
    Base log directory for a CLI command (e.g. sync, auth).
    """
    path = logs_dir() / command
    path.mkdir(parents=True, exist_ok=True)
    return path


def profile_logs_dir(command: str, profile: str) -> Path:
    """
    Log directory for a specific profile under a command.
    """
    path = logs_dir() / command / profile
    path.mkdir(parents=True, exist_ok=True)
    return path

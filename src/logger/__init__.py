"""
Process logging for podsync.

A run logs to ``<logs>/<command>[/<profile>]/<command>-<run_id>.log`` and,
unless quiet, to the Rich console. Handlers live on the root logger only;
modules just call get_logger(__name__).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from env import get_logging_env
from env.paths import module_logs_dir, profile_logs_dir
from . import state as _state
from .console import build_console_handler
from .retention import enforce_retention
from .run_file import RunLogFile

# chatty at INFO; podsync logs its own request outcomes
_LIBRARY_LOGGERS = ("urllib3", "requests")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _parse_level(name: str) -> int:
    value = logging.getLevelName(name.strip().upper())
    return value if isinstance(value, int) else logging.INFO


@dataclass(frozen=True)
class LogContext:
    """Where and how loudly one run logs."""

    command: str
    run_id: str
    profile: Optional[str] = None
    level: int = logging.INFO
    retention: int = 30
    quiet: bool = False

    @classmethod
    def from_env(cls) -> "LogContext":
        env = get_logging_env()
        return cls(
            command=env.command,
            run_id=env.run_id or datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
            profile=env.profile,
            level=logging.DEBUG if env.verbose else _parse_level(env.log_level),
            retention=env.log_retention,
            quiet=env.quiet,
        )

    @property
    def log_dir(self) -> Path:
        if self.profile:
            return profile_logs_dir(self.command, self.profile)
        return module_logs_dir(self.command)

    @property
    def logfile(self) -> Path:
        return self.log_dir / f"{self.command}-{self.run_id}.log"


def init_logging(context: Optional[LogContext] = None) -> Path:
    """
    Point process logging at this run's file and return the file's path.

    Without a context the run is described by the environment that
    bootstrap stamped. Calling again for the same file only updates the level.
    """
    ctx = context or LogContext.from_env()
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root = logging.getLogger()
    root.setLevel(ctx.level)

    logfile = ctx.logfile
    if _state.INITIALIZED and _state.LOG_FILE_PATH == logfile:
        return logfile

    run_file = next((h for h in root.handlers if isinstance(h, RunLogFile)), None)
    root.handlers.clear()
    if run_file is None:
        run_file = RunLogFile(logfile)
    else:
        run_file.retarget(logfile)
    root.addHandler(run_file)

    if not ctx.quiet:
        root.addHandler(build_console_handler(ctx.level))

    # after the new file exists, so it counts as the newest log
    enforce_retention(ctx.log_dir, ctx.retention)

    _state.INITIALIZED = True
    _state.RUN_ID = ctx.run_id
    _state.LOG_DIR = ctx.log_dir
    _state.LOG_FILE_PATH = logfile
    return logfile


__all__ = ["LogContext", "get_logger", "init_logging"]

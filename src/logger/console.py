from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from env import get_logging_env

# stdout so the sync summary and log lines interleave in cron mail
CONSOLE = Console(file=sys.stdout, soft_wrap=True)


class QuietFilter(logging.Filter):
    """
    Drop console records when PODSYNC_QUIET is set after init.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return not get_logging_env().quiet


def build_console_handler(level: int = logging.INFO) -> logging.Handler:
    handler = RichHandler(
        console=CONSOLE,
        level=level,
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )

    # RichHandler renders the level column itself.
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(QuietFilter())
    return handler

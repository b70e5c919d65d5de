from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s | [%(levelname)s] | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class RunLogFile(logging.FileHandler):
    """
    The log file of one podsync run.

    ``retarget`` moves the handler to another run's file in place, so a
    second init_logging() in the same process never stacks handlers.
    """

    def __init__(self, logfile: Path) -> None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(logfile, encoding="utf-8")
        self.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))

    @property
    def path(self) -> Path:
        return Path(self.baseFilename)

    def retarget(self, logfile: Path) -> None:
        target = os.path.abspath(logfile)
        if target == self.baseFilename:
            return
        logfile.parent.mkdir(parents=True, exist_ok=True)

        with self.lock:
            if self.stream is not None:
                self.stream.flush()
                self.stream.close()
            self.baseFilename = target
            self.stream = self._open()

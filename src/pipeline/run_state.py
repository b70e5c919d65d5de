from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional


class RunStage(str, Enum):
    INIT = "init"
    SNAPSHOT_LOADED = "snapshot_loaded"
    PER_SHOW_SYNC = "per_show_sync"
    CLEANUP = "cleanup"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[RunStage, FrozenSet[RunStage]] = {
    RunStage.INIT: frozenset({RunStage.SNAPSHOT_LOADED, RunStage.FAILED}),
    RunStage.SNAPSHOT_LOADED: frozenset({RunStage.PER_SHOW_SYNC, RunStage.FAILED}),
    RunStage.PER_SHOW_SYNC: frozenset({RunStage.CLEANUP}),
    RunStage.CLEANUP: frozenset({RunStage.DONE}),
    RunStage.DONE: frozenset(),
    RunStage.FAILED: frozenset(),
}


@dataclass
class RunCounts:
    shows_processed: int = 0
    new_items: int = 0
    removed_items: int = 0


@dataclass
class RunState:
    """
    Canonical runtime state for a single podsync run.

    Mutated by the runner only; everything else treats it as read-only.
    """

    playlist_id: Optional[str] = None
    stage: RunStage = RunStage.INIT
    counts: RunCounts = field(default_factory=RunCounts)
    stop_reason: Optional[str] = None
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    # ------------------------------------------------------------------
    # Stage management
    # ------------------------------------------------------------------

    def advance(self, stage: RunStage) -> None:
        if stage not in _TRANSITIONS[self.stage]:
            raise RuntimeError(
                f"Illegal run transition: {self.stage.value} -> {stage.value}"
            )
        self.stage = stage

    def fail(self, reason: str) -> None:
        self.advance(RunStage.FAILED)
        self.stop_reason = reason
        self.finished_at = time.time()

    def finish(self) -> None:
        self.advance(RunStage.DONE)
        self.finished_at = time.time()

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def mark_show_processed(self) -> None:
        self.counts.shows_processed += 1

    def add_new_items(self, count: int) -> None:
        self.counts.new_items += count

    def add_removed_items(self, count: int) -> None:
        self.counts.removed_items += count

    @property
    def runtime_seconds(self) -> float:
        end = self.finished_at or time.time()
        return round(end - self.started_at, 2)

from __future__ import annotations

from pipeline.models import (
    CandidateEpisode,
    EpisodeProgress,
    JobOutcome,
    PassResult,
    PlaylistEntry,
    RetentionPolicy,
    ShowConfig,
    ShowResult,
)
from pipeline.run_state import RunStage, RunState

__all__ = [
    "CandidateEpisode",
    "EpisodeProgress",
    "JobOutcome",
    "PassResult",
    "PlaylistEntry",
    "RetentionPolicy",
    "ShowConfig",
    "ShowResult",
    "RunStage",
    "RunState",
]

"""
Entity model for one podsync run.

Everything here is rebuilt from Spotify on every run; nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from errors import ErrorKind, config_error


@dataclass(frozen=True)
class PlaylistEntry:
    id: str
    uri: str
    added_at: Optional[datetime]
    show_id: Optional[str]
    is_episode: bool = True


@dataclass(frozen=True)
class ShowConfig:
    show_id: str
    display_name: str = ""

    @property
    def label(self) -> str:
        return self.display_name or self.show_id


@dataclass(frozen=True)
class CandidateEpisode:
    uri: str
    name: str
    show_id: str


@dataclass(frozen=True)
class EpisodeProgress:
    id: str
    fully_played: bool


@dataclass(frozen=True)
class RetentionPolicy:
    max_age_days: int
    max_per_show: int
    new_episodes_per_show_limit: int

    def __post_init__(self) -> None:
        for name in ("max_age_days", "max_per_show", "new_episodes_per_show_limit"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise config_error(f"{name} must be a positive integer, got {value!r}")


# ----------------------------
# Results
# ----------------------------


@dataclass(frozen=True)
class ShowResult:
    show_id: str
    success: bool
    error: Optional[str] = None
    added: Tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"showId": self.show_id, "success": self.success}
        if self.error:
            d["error"] = self.error
        return d


@dataclass(frozen=True)
class PassResult:
    name: str
    success: bool
    removed: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class JobOutcome:
    """
    Single result of a run.

    A failed outcome only ever comes from a fatal precondition
    (config, auth, snapshot). Everything else is folded into
    ``results`` and ``cleanup`` of a successful outcome.
    """

    success: bool
    new_episodes_added: int = 0
    results: List[ShowResult] = field(default_factory=list)
    cleanup: List[PassResult] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, kind: ErrorKind, message: str) -> "JobOutcome":
        return cls(success=False, error_kind=kind, error=message)

    @property
    def removed_by_pass(self) -> Dict[str, int]:
        return {p.name: p.removed for p in self.cleanup}

    def as_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "type": self.error_kind.value if self.error_kind else None,
            }

        cleanup: Dict[str, Any] = {}
        for p in self.cleanup:
            entry: Dict[str, Any] = {"success": p.success, "removed": p.removed}
            if p.error:
                entry["error"] = p.error
            cleanup[p.name] = entry

        return {
            "success": True,
            "newEpisodesAdded": self.new_episodes_added,
            "results": [r.as_dict() for r in self.results],
            "cleanup": cleanup,
        }

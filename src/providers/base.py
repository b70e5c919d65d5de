from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from pipeline.models import CandidateEpisode, EpisodeProgress


class TrackClient(ABC):
    """
    Remote operations the sync core relies on.

    Every call is blocking and either succeeds or raises PodsyncError once
    the transport's own bounded retries are used up.
    """

    name: str

    @abstractmethod
    def list_playlist_items(self, playlist_id: str) -> List[Dict[str, Any]]:
        """Raw playlist item records, in playlist order, across all pages."""
        raise NotImplementedError

    @abstractmethod
    def list_newest_episodes(self, show_id: str, limit: int) -> List[CandidateEpisode]:
        """Newest ``limit`` episodes of a show, newest first. May be empty."""
        raise NotImplementedError

    @abstractmethod
    def add_to_playlist(self, playlist_id: str, uris: Sequence[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_from_playlist(self, playlist_id: str, uris: Sequence[str]) -> None:
        """Remove every occurrence of ``uris``. Absent URIs are not an error."""
        raise NotImplementedError

    @abstractmethod
    def get_episode_progress(self, episode_ids: Sequence[str]) -> List[EpisodeProgress]:
        raise NotImplementedError

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from logger import get_logger
from pipeline.models import CandidateEpisode, EpisodeProgress
from providers.base import TrackClient

logger = get_logger(__name__)


class DryRunTrackClient(TrackClient):
    """
    Pass reads through to ``inner``; log mutations instead of sending them.
    """

    def __init__(self, inner: TrackClient) -> None:
        self.inner = inner
        self.name = f"dry-run:{getattr(inner, 'name', 'client')}"
        self.added: List[str] = []
        self.removed: List[str] = []

    def list_playlist_items(self, playlist_id: str) -> List[Dict[str, Any]]:
        return self.inner.list_playlist_items(playlist_id)

    def list_newest_episodes(self, show_id: str, limit: int) -> List[CandidateEpisode]:
        return self.inner.list_newest_episodes(show_id, limit)

    def get_episode_progress(self, episode_ids: Sequence[str]) -> List[EpisodeProgress]:
        return self.inner.get_episode_progress(episode_ids)

    def add_to_playlist(self, playlist_id: str, uris: Sequence[str]) -> None:
        logger.info("[dry-run] Would add %d item(s) to %s: %s", len(uris), playlist_id, ", ".join(uris))
        self.added.extend(uris)

    def remove_from_playlist(self, playlist_id: str, uris: Sequence[str]) -> None:
        logger.info("[dry-run] Would remove %d item(s) from %s: %s", len(uris), playlist_id, ", ".join(uris))
        self.removed.extend(uris)

import logging
from datetime import datetime, timedelta, timezone

import pytest

from errors import transport_error
from providers.base import TrackClient

PLAYLIST_ID = "37i9dQZF1DXcBWIGoYBM5M"
SHOW_A = "4rOoJ6Egrf8K2IrywzwOMk"
SHOW_B = "2MAi0BvDc6GTFvKFPXnkCL"
SHOW_C = "5CfCWKI5pZ28U0uOzXkDHe"

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def days_ago(n: float) -> datetime:
    return NOW - timedelta(days=n)


def make_item(episode_id, show_id=SHOW_A, added_at=None, *, kind="episode"):
    """A playlist item in the shape Spotify returns it."""
    prefix = "spotify:episode:" if kind == "episode" else "spotify:track:"
    if isinstance(added_at, datetime):
        added_at = added_at.strftime("%Y-%m-%dT%H:%M:%SZ")
    return {
        "added_at": added_at or "2026-02-28T00:00:00Z",
        "track": {
            "id": episode_id,
            "uri": prefix + episode_id,
            "type": kind,
            "artists": [{"id": show_id}],
        },
    }


class FakeTrackClient(TrackClient):
    """
    In-memory playlist. Adds and removes mutate ``items`` so a second run
    sees the result of the first.
    """

    name = "fake"

    def __init__(self, items=None, episodes=None, progress=None):
        self.items = items if isinstance(items, Exception) else list(items or [])
        self.episodes = dict(episodes or {})
        self.progress = progress if progress is not None else []
        self.fail_adds = set()
        self.fail_removes = False
        self.calls = []
        self.added = []
        self.removals = []
        self.progress_requests = []

    def list_playlist_items(self, playlist_id):
        self.calls.append(("list_playlist_items", playlist_id))
        if isinstance(self.items, Exception):
            raise self.items
        return list(self.items)

    def list_newest_episodes(self, show_id, limit):
        self.calls.append(("list_newest_episodes", show_id, limit))
        value = self.episodes.get(show_id, [])
        if isinstance(value, Exception):
            raise value
        return list(value)[:limit]

    def add_to_playlist(self, playlist_id, uris):
        self.calls.append(("add_to_playlist", list(uris)))
        for uri in uris:
            if uri in self.fail_adds:
                raise transport_error(f"add_to_playlist failed for {uri}", 502)
        for uri in uris:
            self.added.append(uri)
            episode_id = uri.rsplit(":", 1)[-1]
            self.items.append(make_item(episode_id, added_at="2026-03-01T12:00:00Z"))

    def remove_from_playlist(self, playlist_id, uris):
        self.calls.append(("remove_from_playlist", list(uris)))
        if self.fail_removes:
            raise transport_error("remove_from_playlist failed", 500)
        self.removals.append(list(uris))
        gone = set(uris)
        self.items = [i for i in self.items if i["track"]["uri"] not in gone]

    def get_episode_progress(self, episode_ids):
        self.calls.append(("get_episode_progress", list(episode_ids)))
        self.progress_requests.append(list(episode_ids))
        if isinstance(self.progress, Exception):
            raise self.progress
        return list(self.progress)

    def call_names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_client():
    return FakeTrackClient()


@pytest.fixture(autouse=True)
def clean_env_and_logging(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, cached env views or logger state.
    """
    import os

    for k in list(os.environ):
        if k.startswith(("PODSYNC_", "SPOTIFY_")) or k in ("LOG_LEVEL", "LOG_RETENTION"):
            monkeypatch.delenv(k, raising=False)

    monkeypatch.setenv("PODSYNC_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PODSYNC_PROFILES_DIR", str(tmp_path / "profiles"))

    from env import reset_env_caches
    import logger.state

    reset_env_caches()
    logger.state.reset()

    root = logging.getLogger()
    saved_level = root.level
    for h in list(root.handlers):
        root.removeHandler(h)

    yield

    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.setLevel(saved_level)
    reset_env_caches()


@pytest.fixture
def sync_env(monkeypatch):
    """Minimal valid environment for a sync run with an injected client."""
    monkeypatch.setenv("SPOTIFY_PLAYLIST_ID", PLAYLIST_ID)
    monkeypatch.setenv("SPOTIFY_SHOW_IDS", f"{SHOW_A}=Show A,{SHOW_B}=Show B")
    monkeypatch.setenv("PODSYNC_MAX_AGE_DAYS", "30")
    monkeypatch.setenv("PODSYNC_MAX_PER_SHOW", "2")
    monkeypatch.setenv("PODSYNC_NEW_EPISODES_PER_SHOW", "2")
    monkeypatch.setenv("PODSYNC_DISCOVERY_WORKERS", "1")

    from env import reset_env_caches

    reset_env_caches()

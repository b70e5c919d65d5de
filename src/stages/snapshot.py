"""
snapshot.py

Reads the playlist once and normalizes it into PlaylistEntry records.

Every later decision in the run (dedup, age, cap, completion) is made
against this one snapshot, so a failed read is fatal for the run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import config
from logger import get_logger
from pipeline.models import PlaylistEntry
from providers.base import TrackClient

logger = get_logger(__name__)


def parse_added_at(value: Any) -> Optional[datetime]:
    """
    Spotify sends ``2024-03-01T09:15:00Z``. Very old playlist items carry null.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("[snapshot] Unparseable added_at: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _owner_id(track: Dict[str, Any]) -> Optional[str]:
    """Primary artist for tracks; for episodes Spotify lists the show as the artist."""
    artists = track.get("artists") or []
    if artists and isinstance(artists[0], dict) and artists[0].get("id"):
        return str(artists[0]["id"])
    show = track.get("show")
    if isinstance(show, dict) and show.get("id"):
        return str(show["id"])
    return None


def normalize_item(raw: Dict[str, Any]) -> Optional[PlaylistEntry]:
    track = raw.get("track")
    if not isinstance(track, dict):
        return None
    uri = track.get("uri")
    if not uri:
        return None

    uri = str(uri)
    is_episode = track.get("type") == "episode" or uri.startswith(
        config.EPISODE_URI_PREFIX
    )
    entry_id = track.get("id") or uri.rsplit(":", 1)[-1]

    return PlaylistEntry(
        id=str(entry_id),
        uri=uri,
        added_at=parse_added_at(raw.get("added_at")),
        show_id=_owner_id(track),
        is_episode=is_episode,
    )


def build_snapshot(client: TrackClient, playlist_id: str) -> List[PlaylistEntry]:
    """
    Current playlist membership, in playlist order.

    Items without a track or URI (removed / unavailable content) are left out.
    Fetch errors propagate unchanged.
    """
    raw_items = client.list_playlist_items(playlist_id)

    entries: List[PlaylistEntry] = []
    skipped = 0
    for raw in raw_items:
        entry = normalize_item(raw)
        if entry is None:
            skipped += 1
            continue
        entries.append(entry)

    logger.info(
        "[snapshot] Playlist %s: %d entries (%d unavailable skipped)",
        playlist_id,
        len(entries),
        skipped,
    )
    return entries

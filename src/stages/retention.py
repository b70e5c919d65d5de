"""
retention.py

The three cleanup passes. Each one:

- reads the pre-admission snapshot (episodes added this run are never seen)
- decides its removals on its own, without looking at the other passes
- catches PodsyncError at pass scope so a failure never stops the next pass

Removal is keyed by URI, so one call drops every copy of that URI. A
selection that covers only some copies of a duplicated URI is held back
and logged instead of sent.

Age expiry and the per-show cap can pick the same URI. Removing a URI that
is already gone is accepted by Spotify as a no-op, so the second removal
simply succeeds.
"""

from __future__ import annotations

from collections import Counter, OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from errors import PodsyncError
from logger import get_logger
from pipeline.models import EpisodeProgress, PassResult, PlaylistEntry
from providers.base import TrackClient

logger = get_logger(__name__)

AGE_EXPIRY = "age_expiry"
PER_SHOW_CAP = "per_show_cap"
COMPLETED_PURGE = "completed_purge"

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _uris(entries: Iterable[PlaylistEntry]) -> List[str]:
    return list(OrderedDict.fromkeys(e.uri for e in entries))


def _whole_uris_only(
    snapshot: Sequence[PlaylistEntry],
    selected: Sequence[PlaylistEntry],
    pass_name: str,
) -> List[PlaylistEntry]:
    """Drop selected entries whose URI also has an unselected copy in the snapshot."""
    in_snapshot = Counter(e.uri for e in snapshot)
    in_selection = Counter(e.uri for e in selected)
    partial = {u for u, n in in_selection.items() if n < in_snapshot[u]}
    for uri in sorted(partial):
        logger.warning(
            "[cleanup] %s: keeping %s, %d of its %d copies are not due for removal",
            pass_name,
            uri,
            in_snapshot[uri] - in_selection[uri],
            in_snapshot[uri],
        )
    return [e for e in selected if e.uri not in partial]


# ============================================================
# Age expiry
# ============================================================


def select_expired(
    snapshot: Sequence[PlaylistEntry], cutoff: datetime
) -> List[PlaylistEntry]:
    # entries without added_at cannot be aged
    expired = [e for e in snapshot if e.added_at is not None and e.added_at < cutoff]
    return _whole_uris_only(snapshot, expired, AGE_EXPIRY)


def expire_by_age(
    client: TrackClient,
    playlist_id: str,
    snapshot: Sequence[PlaylistEntry],
    max_age_days: int,
    now: Optional[datetime] = None,
) -> PassResult:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=max_age_days)
    expired = select_expired(snapshot, cutoff)

    if not expired:
        logger.info("[cleanup] Age expiry: nothing older than %d days", max_age_days)
        return PassResult(name=AGE_EXPIRY, success=True)

    try:
        client.remove_from_playlist(playlist_id, _uris(expired))
    except PodsyncError as e:
        logger.error("[cleanup] Age expiry failed (%s): %s", e.kind.value, e.message)
        return PassResult(name=AGE_EXPIRY, success=False, error=e.message)

    logger.info(
        "[cleanup] Age expiry: removed %d entries added before %s",
        len(expired),
        cutoff.isoformat(timespec="seconds"),
    )
    return PassResult(name=AGE_EXPIRY, success=True, removed=len(expired))


# ============================================================
# Per-show cap
# ============================================================


def select_over_cap(
    snapshot: Sequence[PlaylistEntry], max_per_show: int
) -> Dict[str, List[PlaylistEntry]]:
    """
    For each show above the cap, its ``count - max_per_show`` oldest entries.

    Ordering is by added_at ascending; the sort is stable so ties keep
    snapshot order. Entries with no added_at sort first. A URI whose other
    copy survives the cap is held back, leaving that show above the cap.
    """
    by_show: Dict[str, List[PlaylistEntry]] = OrderedDict()
    for e in snapshot:
        if e.show_id is None:
            continue
        by_show.setdefault(e.show_id, []).append(e)

    selected: Dict[str, List[PlaylistEntry]] = OrderedDict()
    for show_id, entries in by_show.items():
        excess = len(entries) - max_per_show
        if excess <= 0:
            continue
        oldest_first = sorted(entries, key=lambda e: e.added_at or _OLDEST)
        removable = _whole_uris_only(snapshot, oldest_first[:excess], PER_SHOW_CAP)
        if removable:
            selected[show_id] = removable
    return selected


def cap_per_show(
    client: TrackClient,
    playlist_id: str,
    snapshot: Sequence[PlaylistEntry],
    max_per_show: int,
) -> PassResult:
    over_cap = select_over_cap(snapshot, max_per_show)
    if not over_cap:
        logger.info("[cleanup] Per-show cap: every show within %d", max_per_show)
        return PassResult(name=PER_SHOW_CAP, success=True)

    removed = 0
    errors: List[str] = []
    for show_id, entries in over_cap.items():
        try:
            client.remove_from_playlist(playlist_id, _uris(entries))
        except PodsyncError as e:
            logger.error("[cleanup] Per-show cap failed for show %s: %s", show_id, e.message)
            errors.append(f"{show_id}: {e.message}")
            continue
        removed += len(entries)
        logger.info("[cleanup] Per-show cap: removed %d oldest from show %s", len(entries), show_id)

    return PassResult(
        name=PER_SHOW_CAP,
        success=not errors,
        removed=removed,
        error="; ".join(errors) or None,
    )


# ============================================================
# Completed-episode purge
# ============================================================


def select_completed(
    snapshot: Sequence[PlaylistEntry], progress: Iterable[EpisodeProgress]
) -> List[PlaylistEntry]:
    played = {p.id for p in progress if p.fully_played}
    return [e for e in snapshot if e.is_episode and e.id in played]


def purge_completed(
    client: TrackClient,
    playlist_id: str,
    snapshot: Sequence[PlaylistEntry],
) -> PassResult:
    # progress only exists for episodes; music tracks would come back null
    episode_ids = list(OrderedDict.fromkeys(e.id for e in snapshot if e.is_episode))
    if not episode_ids:
        return PassResult(name=COMPLETED_PURGE, success=True)

    try:
        progress = client.get_episode_progress(episode_ids)
    except PodsyncError as e:
        logger.error("[cleanup] Completed purge aborted (%s): %s", e.kind.value, e.message)
        return PassResult(name=COMPLETED_PURGE, success=False, error=e.message)

    completed = select_completed(snapshot, progress)
    if not completed:
        logger.info("[cleanup] Completed purge: no fully played episodes")
        return PassResult(name=COMPLETED_PURGE, success=True)

    try:
        client.remove_from_playlist(playlist_id, _uris(completed))
    except PodsyncError as e:
        logger.error("[cleanup] Completed purge failed (%s): %s", e.kind.value, e.message)
        return PassResult(name=COMPLETED_PURGE, success=False, error=e.message)

    logger.info("[cleanup] Completed purge: removed %d fully played episodes", len(completed))
    return PassResult(name=COMPLETED_PURGE, success=True, removed=len(completed))

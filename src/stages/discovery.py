"""
discovery.py

Per-show discovery of new episodes and their admission into the playlist.

Discovery is read-only and runs concurrently across shows. Admission
mutates the playlist and always runs sequentially, in show order then
episode order.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import AbstractSet, List, Optional, Sequence, Tuple

from errors import PodsyncError
from logger import get_logger
from pipeline.models import CandidateEpisode, ShowConfig, ShowResult
from providers.base import TrackClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiscoveryResult:
    show: ShowConfig
    missing: Tuple[CandidateEpisode, ...] = ()
    already_present: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


def discover_show(
    client: TrackClient,
    show: ShowConfig,
    existing_uris: AbstractSet[str],
    limit: int,
) -> DiscoveryResult:
    """
    Newest ``limit`` episodes of ``show`` that are not in ``existing_uris``.

    A failed lookup is returned as a failed result rather than raised.
    """
    try:
        episodes = client.list_newest_episodes(show.show_id, limit)
    except PodsyncError as e:
        logger.warning("[discover] %s: lookup failed (%s): %s", show.label, e.kind.value, e.message)
        return DiscoveryResult(show=show, error=e.message)

    missing: List[CandidateEpisode] = []
    present = 0
    seen: set[str] = set()
    for ep in episodes:
        if not ep.uri or ep.uri in seen:
            continue
        seen.add(ep.uri)
        if ep.uri in existing_uris:
            present += 1
        else:
            missing.append(ep)

    logger.debug(
        "[discover] %s: %d fetched, %d already present, %d new",
        show.label,
        len(episodes),
        present,
        len(missing),
    )
    return DiscoveryResult(show=show, missing=tuple(missing), already_present=present)


def discover_all(
    client: TrackClient,
    shows: Sequence[ShowConfig],
    existing_uris: AbstractSet[str],
    limit: int,
    workers: int = 1,
) -> List[DiscoveryResult]:
    """
    Run discover_show for every show. Results keep the order of ``shows``.
    """
    existing = frozenset(existing_uris)
    if workers <= 1 or len(shows) <= 1:
        return [discover_show(client, s, existing, limit) for s in shows]

    with ThreadPoolExecutor(max_workers=min(workers, len(shows))) as executor:
        futures = [
            executor.submit(discover_show, client, s, existing, limit) for s in shows
        ]
        return [f.result() for f in futures]


def admit_episodes(
    client: TrackClient,
    playlist_id: str,
    discoveries: Sequence[DiscoveryResult],
) -> List[ShowResult]:
    """
    Add every missing episode, one call per episode.

    A failed add is logged and skipped; admission carries on with the next
    candidate. The show is reported as failed if its lookup failed or any
    of its adds failed.
    """
    results: List[ShowResult] = []

    for d in discoveries:
        if not d.success:
            results.append(ShowResult(show_id=d.show.show_id, success=False, error=d.error))
            continue

        added: List[str] = []
        failures: List[str] = []
        for ep in d.missing:
            try:
                client.add_to_playlist(playlist_id, [ep.uri])
            except PodsyncError as e:
                logger.error("[admit] %s: failed to add %s: %s", d.show.label, ep.uri, e.message)
                failures.append(f"{ep.uri}: {e.message}")
                continue
            logger.info("[admit] %s: added %s (%s)", d.show.label, ep.name or ep.uri, ep.uri)
            added.append(ep.uri)

        error = None
        if failures:
            error = f"Failed to add {len(failures)} episode(s): " + "; ".join(failures)

        results.append(
            ShowResult(
                show_id=d.show.show_id,
                success=not failures,
                error=error,
                added=tuple(added),
            )
        )

    return results

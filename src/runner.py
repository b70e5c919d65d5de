from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from auth.registry import get_provider
from env import Environment, get_env
from errors import PodsyncError
from logger import get_logger
from pipeline.models import JobOutcome, PassResult, PlaylistEntry
from pipeline.run_state import RunStage, RunState
from providers.base import TrackClient
from providers.dry_run import DryRunTrackClient
from stages.discovery import admit_episodes, discover_all
from stages.retention import cap_per_show, expire_by_age, purge_completed
from stages.snapshot import build_snapshot

log = get_logger("podsync.runner")


def _log_summary(outcome: JobOutcome, state: RunState) -> None:
    log.info("Run summary (%.2fs):", state.runtime_seconds)
    for r in outcome.results:
        if r.success:
            log.info("  - show %s: ok (%d added)", r.show_id, len(r.added))
        else:
            log.info("  - show %s: failed (%s)", r.show_id, r.error)
    for p in outcome.cleanup:
        status = "ok" if p.success else f"failed ({p.error})"
        log.info("  - %s: %s, %d removed", p.name, status, p.removed)
    log.info("  - new episodes added: %d", outcome.new_episodes_added)


def run_cleanup(
    client: TrackClient,
    playlist_id: str,
    snapshot: List[PlaylistEntry],
    *,
    max_age_days: int,
    max_per_show: int,
    now: datetime,
) -> List[PassResult]:
    """
    Age expiry, then per-show cap, then completed purge, in that order.
    All three see the same snapshot.
    """
    return [
        expire_by_age(client, playlist_id, snapshot, max_age_days, now=now),
        cap_per_show(client, playlist_id, snapshot, max_per_show),
        purge_completed(client, playlist_id, snapshot),
    ]


def run_once(
    env: Optional[Environment] = None,
    *,
    client: Optional[TrackClient] = None,
    now: Optional[datetime] = None,
) -> JobOutcome:
    """
    One full sync: snapshot -> per-show discovery/admission -> cleanup.

    Only config, auth and snapshot failures produce a failed outcome. Every
    other failure is recorded inside the results of a successful one.
    """
    state = RunState()
    now = now or datetime.now(timezone.utc)

    try:
        env = env or get_env()
        settings = env.sync_settings()
        state.playlist_id = settings.playlist_id

        if client is None:
            client = get_provider("spotify", env).build_client()
        if settings.dry_run:
            client = DryRunTrackClient(client)

        snapshot = build_snapshot(client, settings.playlist_id)
        state.advance(RunStage.SNAPSHOT_LOADED)
    except PodsyncError as e:
        state.fail(e.kind.value)
        log.error("[run] Aborted (%s): %s", e.kind.value, e.message)
        log.info("RUN_STATUS=%s", e.kind.value)
        return JobOutcome.failed(e.kind, e.message)

    # ---- per-show sync ----
    state.advance(RunStage.PER_SHOW_SYNC)
    policy = settings.policy
    existing_uris = {e.uri for e in snapshot}

    discoveries = discover_all(
        client,
        settings.shows,
        existing_uris,
        policy.new_episodes_per_show_limit,
        workers=settings.discovery_workers,
    )
    show_results = admit_episodes(client, settings.playlist_id, discoveries)

    for r in show_results:
        state.mark_show_processed()
        state.add_new_items(len(r.added))

    # ---- cleanup (pre-admission snapshot) ----
    state.advance(RunStage.CLEANUP)
    cleanup = run_cleanup(
        client,
        settings.playlist_id,
        snapshot,
        max_age_days=policy.max_age_days,
        max_per_show=policy.max_per_show,
        now=now,
    )
    for p in cleanup:
        state.add_removed_items(p.removed)

    state.finish()
    outcome = JobOutcome(
        success=True,
        new_episodes_added=state.counts.new_items,
        results=show_results,
        cleanup=cleanup,
    )
    _log_summary(outcome, state)
    log.info("RUN_STATUS=completed")
    return outcome

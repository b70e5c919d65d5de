from datetime import datetime, timezone

import pytest

from conftest import PLAYLIST_ID, SHOW_A, SHOW_B, FakeTrackClient, make_item
from errors import ErrorKind, PodsyncError, transport_error
from stages.snapshot import build_snapshot, normalize_item, parse_added_at


def test_snapshot_preserves_playlist_order():
    client = FakeTrackClient(
        items=[
            make_item("ep1", SHOW_A, "2026-02-01T00:00:00Z"),
            make_item("ep2", SHOW_B, "2026-02-02T00:00:00Z"),
            make_item("ep3", SHOW_A, "2026-02-03T00:00:00Z"),
        ]
    )

    snapshot = build_snapshot(client, PLAYLIST_ID)

    assert [e.id for e in snapshot] == ["ep1", "ep2", "ep3"]
    assert [e.show_id for e in snapshot] == [SHOW_A, SHOW_B, SHOW_A]
    assert snapshot[0].uri == "spotify:episode:ep1"
    assert snapshot[0].added_at == datetime(2026, 2, 1, tzinfo=timezone.utc)


def test_snapshot_excludes_items_without_track_or_uri():
    no_uri = make_item("ep2")
    no_uri["track"]["uri"] = None

    client = FakeTrackClient(
        items=[
            {"added_at": "2026-02-01T00:00:00Z", "track": None},
            no_uri,
            make_item("ep3"),
        ]
    )

    snapshot = build_snapshot(client, PLAYLIST_ID)

    assert [e.id for e in snapshot] == ["ep3"]


def test_snapshot_keeps_duplicate_uris_as_separate_entries():
    client = FakeTrackClient(items=[make_item("ep1"), make_item("ep1")])

    snapshot = build_snapshot(client, PLAYLIST_ID)

    assert len(snapshot) == 2


def test_snapshot_fetch_failure_propagates():
    client = FakeTrackClient(items=transport_error("boom", 503))

    with pytest.raises(PodsyncError) as exc:
        build_snapshot(client, PLAYLIST_ID)

    assert exc.value.kind is ErrorKind.TRANSPORT


def test_show_id_falls_back_to_show_reference():
    raw = make_item("ep1")
    raw["track"]["artists"] = []
    raw["track"]["show"] = {"id": SHOW_B}

    entry = normalize_item(raw)

    assert entry.show_id == SHOW_B


def test_music_tracks_are_not_episodes():
    entry = normalize_item(make_item("trk1", kind="track"))

    assert entry.is_episode is False
    assert entry.uri == "spotify:track:trk1"


def test_parse_added_at_variants():
    assert parse_added_at("2026-02-01T10:30:00Z") == datetime(
        2026, 2, 1, 10, 30, tzinfo=timezone.utc
    )
    assert parse_added_at(None) is None
    assert parse_added_at("not a date") is None
    # naive timestamps are taken as UTC
    assert parse_added_at("2026-02-01T10:30:00").tzinfo is not None

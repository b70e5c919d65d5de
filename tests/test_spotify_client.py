import pytest

import config
from conftest import PLAYLIST_ID, SHOW_A
from errors import ErrorKind, PodsyncError
from providers.spotify.api_manager import RetryPolicy
from providers.spotify.client import SpotifyTrackClient


class Recorder:
    """Replaces SpotifyTrackClient._request; answers from a queue of payloads."""

    def __init__(self, *payloads):
        self.payloads = list(payloads)
        self.calls = []

    def __call__(self, method, url, *, params=None, json=None, name=""):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "name": name})
        if not self.payloads:
            return {}
        value = self.payloads.pop(0)
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def client():
    return SpotifyTrackClient("token", market="US", retry=RetryPolicy(max_retries=1))


def install(monkeypatch, client, *payloads):
    rec = Recorder(*payloads)
    monkeypatch.setattr(client, "_request", rec)
    return rec


def test_requires_access_token():
    with pytest.raises(ValueError):
        SpotifyTrackClient("  ")


def test_list_playlist_items_follows_next(monkeypatch, client):
    rec = install(
        monkeypatch,
        client,
        {"items": [{"track": {"uri": "spotify:episode:1"}}], "next": "https://api.spotify.com/next-page"},
        {"items": [{"track": {"uri": "spotify:episode:2"}}, None], "next": None},
    )

    items = client.list_playlist_items(PLAYLIST_ID)

    assert [i["track"]["uri"] for i in items] == ["spotify:episode:1", "spotify:episode:2"]
    assert rec.calls[0]["params"]["additional_types"] == "episode"
    assert rec.calls[0]["params"]["market"] == "US"
    assert rec.calls[1]["url"] == "https://api.spotify.com/next-page"
    assert rec.calls[1]["params"] is None


def test_list_playlist_items_without_items_is_malformed(monkeypatch, client):
    install(monkeypatch, client, {"next": None})

    with pytest.raises(PodsyncError) as exc:
        client.list_playlist_items(PLAYLIST_ID)
    assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE


def test_list_newest_episodes(monkeypatch, client):
    rec = install(
        monkeypatch,
        client,
        {"items": [{"uri": "spotify:episode:new", "name": "New"}, {"name": "no uri"}, None]},
    )

    episodes = client.list_newest_episodes(SHOW_A, 500)

    assert [(e.uri, e.name, e.show_id) for e in episodes] == [("spotify:episode:new", "New", SHOW_A)]
    assert rec.calls[0]["params"]["limit"] == 50


def test_list_newest_episodes_rejects_bad_show_id(monkeypatch, client):
    rec = install(monkeypatch, client)

    with pytest.raises(PodsyncError) as exc:
        client.list_newest_episodes("not a show", 1)
    assert exc.value.kind is ErrorKind.CONFIG
    assert rec.calls == []


def test_episode_progress_is_batched_and_skips_null(monkeypatch, client):
    ids = [f"ep{i}" for i in range(config.EPISODE_LOOKUP_BATCH + 1)]
    first = {"episodes": [{"id": i, "resume_point": {"fully_played": i == "ep3"}} for i in ids[:-1]]}
    second = {"episodes": [None]}
    rec = install(monkeypatch, client, first, second)

    progress = client.get_episode_progress(ids)

    assert len(rec.calls) == 2
    assert rec.calls[1]["params"]["ids"] == ids[-1]
    assert [p.id for p in progress if p.fully_played] == ["ep3"]
    assert len(progress) == config.EPISODE_LOOKUP_BATCH


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"episodes": [{"id": "ep1"}]},
        {"episodes": [{"resume_point": {"fully_played": True}}]},
    ],
)
def test_episode_progress_malformed(monkeypatch, client, payload):
    install(monkeypatch, client, payload)

    with pytest.raises(PodsyncError) as exc:
        client.get_episode_progress(["ep1"])
    assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE


def test_add_to_playlist_rejects_non_episode_uris(monkeypatch, client):
    rec = install(monkeypatch, client)

    with pytest.raises(PodsyncError) as exc:
        client.add_to_playlist(PLAYLIST_ID, ["spotify:track:abc"])
    assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE
    assert rec.calls == []


def test_add_to_playlist_posts_uris(monkeypatch, client):
    rec = install(monkeypatch, client)

    client.add_to_playlist(PLAYLIST_ID, ["spotify:episode:1"])

    assert rec.calls == [
        {
            "method": "POST",
            "url": config.PLAYLIST_TRACKS_URL.format(playlist_id=PLAYLIST_ID),
            "params": None,
            "json": {"uris": ["spotify:episode:1"]},
            "name": "add_to_playlist",
        }
    ]


def test_remove_from_playlist_chunks_by_hundred(monkeypatch, client):
    rec = install(monkeypatch, client)
    uris = [f"spotify:episode:{i}" for i in range(config.PLAYLIST_MUTATION_BATCH + 5)]

    client.remove_from_playlist(PLAYLIST_ID, uris)

    assert [c["method"] for c in rec.calls] == ["DELETE", "DELETE"]
    assert len(rec.calls[0]["json"]["tracks"]) == config.PLAYLIST_MUTATION_BATCH
    assert rec.calls[1]["json"]["tracks"][-1] == {"uri": uris[-1]}


def test_remove_nothing_makes_no_call(monkeypatch, client):
    rec = install(monkeypatch, client)

    client.remove_from_playlist(PLAYLIST_ID, [])

    assert rec.calls == []


def test_request_sends_bearer_token(monkeypatch):
    import requests

    seen = {}

    def fake_request(method, url, **kwargs):
        seen.update(kwargs, method=method, url=url)
        r = requests.Response()
        r.status_code = 200
        r._content = b'{"id": "me"}'
        return r

    monkeypatch.setattr(requests, "request", fake_request)
    client = SpotifyTrackClient("abc123", timeout_sec=5)

    assert client.get_current_user() == {"id": "me"}
    assert seen["headers"] == {"Authorization": "Bearer abc123"}
    assert seen["timeout"] == 5
    assert seen["url"] == config.ME_URL


def test_non_json_body_is_malformed(monkeypatch):
    import requests

    def fake_request(method, url, **kwargs):
        r = requests.Response()
        r.status_code = 200
        r._content = b"<html>"
        return r

    monkeypatch.setattr(requests, "request", fake_request)

    with pytest.raises(PodsyncError) as exc:
        SpotifyTrackClient("abc123").get_current_user()
    assert exc.value.kind is ErrorKind.MALFORMED_RESPONSE

import pytest
import requests

import config
from auth import AuthHealthStatus, check, get_provider
from auth.providers.spotify import SpotifyAuthProvider, refresh_access_token
from env import Environment
from errors import ErrorKind, PodsyncError, transport_error
from providers.spotify.client import SpotifyTrackClient


def token_response(status=200, body=b'{"access_token": "fresh", "token_type": "Bearer"}'):
    r = requests.Response()
    r.status_code = status
    r._content = body
    return r


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "cid")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")
    monkeypatch.setenv("SPOTIFY_REFRESH_TOKEN", "refresh")
    monkeypatch.setenv("SPOTIFY_MARKET", "GB")
    monkeypatch.setenv("PODSYNC_MAX_RETRIES", "5")


def test_refresh_posts_refresh_grant(monkeypatch):
    seen = {}

    def fake_post(url, **kwargs):
        seen.update(kwargs, url=url)
        return token_response()

    monkeypatch.setattr(requests, "post", fake_post)

    assert refresh_access_token("cid", "secret", "refresh", timeout_sec=3) == "fresh"
    assert seen["url"] == config.TOKEN_URL
    assert seen["data"] == {"grant_type": "refresh_token", "refresh_token": "refresh"}
    assert seen["auth"] == ("cid", "secret")
    assert seen["timeout"] == 3


def test_refresh_warns_about_missing_scopes(monkeypatch, caplog):
    body = b'{"access_token": "fresh", "scope": "playlist-read-private"}'
    monkeypatch.setattr(requests, "post", lambda url, **kw: token_response(body=body))

    with caplog.at_level("WARNING", logger="auth.spotify"):
        assert refresh_access_token("cid", "secret", "refresh") == "fresh"

    assert "user-read-playback-position" in caplog.text


@pytest.mark.parametrize(
    "response",
    [
        token_response(400, b'{"error": "invalid_grant"}'),
        token_response(200, b"{}"),
        token_response(200, b"not json"),
    ],
)
def test_refresh_failures_are_auth_errors(monkeypatch, response):
    monkeypatch.setattr(requests, "post", lambda url, **kw: response)

    with pytest.raises(PodsyncError) as exc:
        refresh_access_token("cid", "secret", "refresh")
    assert exc.value.kind is ErrorKind.AUTH


def test_refresh_network_error_is_auth_error(monkeypatch):
    def boom(url, **kw):
        raise requests.ConnectionError("no route")

    monkeypatch.setattr(requests, "post", boom)

    with pytest.raises(PodsyncError) as exc:
        refresh_access_token("cid", "secret", "refresh")
    assert exc.value.kind is ErrorKind.AUTH
    assert "no route" in exc.value.message


def test_build_client_carries_env_settings(monkeypatch, credentials):
    monkeypatch.setattr(requests, "post", lambda url, **kw: token_response())

    client = SpotifyAuthProvider(Environment()).build_client()

    assert isinstance(client, SpotifyTrackClient)
    assert client.market == "GB"
    assert client.retry.max_retries == 5


def test_each_provider_builds_its_own_client(monkeypatch, credentials):
    monkeypatch.setattr(requests, "post", lambda url, **kw: token_response())

    first = get_provider("spotify").build_client()
    second = get_provider("spotify").build_client()

    assert first is not second


def test_unknown_provider():
    with pytest.raises(ValueError):
        get_provider("apple")


def test_missing_credentials_make_no_token_request(monkeypatch):
    def fail(*a, **kw):
        raise AssertionError("token endpoint must not be called")

    monkeypatch.setattr(requests, "post", fail)

    with pytest.raises(PodsyncError) as exc:
        SpotifyAuthProvider(Environment()).ensure_ready()
    assert exc.value.kind is ErrorKind.CONFIG


def test_health_check_ok(monkeypatch, credentials):
    monkeypatch.setattr(requests, "post", lambda url, **kw: token_response())
    monkeypatch.setattr(
        SpotifyTrackClient, "get_current_user", lambda self: {"id": "u1", "display_name": "Listener"}
    )

    result = check("spotify")

    assert result.status is AuthHealthStatus.OK
    assert "Listener" in result.message


def test_health_check_invalid_grant(monkeypatch, credentials):
    monkeypatch.setattr(
        requests, "post", lambda url, **kw: token_response(400, b'{"error": "invalid_grant"}')
    )

    result = check("spotify")

    assert result.status is AuthHealthStatus.AUTH_INVALID


def test_health_check_transport_failure(monkeypatch, credentials):
    def unreachable(self):
        raise transport_error("get_current_user failed (HTTP 503)", 503)

    monkeypatch.setattr(requests, "post", lambda url, **kw: token_response())
    monkeypatch.setattr(SpotifyTrackClient, "get_current_user", unreachable)

    assert check().status is AuthHealthStatus.FAILED

"""Spotify Web API client for playlist membership, show episodes and playback progress."""

from __future__ import annotations

import urllib.parse
from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests

import config
from errors import config_error, malformed_response
from logger import get_logger
from pipeline.models import CandidateEpisode, EpisodeProgress
from providers.base import TrackClient
from providers.spotify.api_manager import RetryPolicy, execute_with_retry

logger = get_logger(__name__)

_PLAYLIST_FIELDS = "items(added_at,track(id,uri,type,artists(id),show(id))),next"
_MAX_SHOW_EPISODES_LIMIT = 50


def _chunks(values: Sequence[str], size: int) -> Iterator[List[str]]:
    for start in range(0, len(values), size):
        yield list(values[start : start + size])


def _quote(value: str) -> str:
    return urllib.parse.quote(value, safe="")


class SpotifyTrackClient(TrackClient):
    """
    Request-scoped client holding one access token.

    Built once per run by the auth provider and passed explicitly to every
    stage; never stored at module level.
    """

    name = "spotify"

    def __init__(
        self,
        access_token: str,
        *,
        market: Optional[str] = None,
        timeout_sec: int = config.DEFAULT_REQUEST_TIMEOUT_SEC,
        retry: RetryPolicy = RetryPolicy(),
    ) -> None:
        token = (access_token or "").strip()
        if not token:
            raise ValueError("access_token is required")
        self._access_token = token
        self.market = market
        self.timeout_sec = timeout_sec
        self.retry = retry

    # -----------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        name: str = "",
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self._access_token}"}

        def _op() -> requests.Response:
            return requests.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout_sec,
            )

        response = execute_with_retry(_op, name or f"{method} {url}", self.retry)
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise malformed_response(f"{name}: response is not JSON") from e
        if not isinstance(payload, dict):
            raise malformed_response(f"{name}: expected a JSON object")
        return payload

    def _market_params(self) -> Dict[str, Any]:
        return {"market": self.market} if self.market else {}

    # -----------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------

    def get_current_user(self) -> Dict[str, Any]:
        return self._request("GET", config.ME_URL, name="get_current_user")

    def list_playlist_items(self, playlist_id: str) -> List[Dict[str, Any]]:
        url = config.PLAYLIST_TRACKS_URL.format(playlist_id=_quote(playlist_id))
        params: Optional[Dict[str, Any]] = {
            "fields": _PLAYLIST_FIELDS,
            "limit": config.PLAYLIST_PAGE_SIZE,
            "additional_types": "episode",
            **self._market_params(),
        }

        items: List[Dict[str, Any]] = []
        page = 0
        while url:
            payload = self._request("GET", url, params=params, name="list_playlist_items")
            raw_items = payload.get("items")
            if not isinstance(raw_items, list):
                raise malformed_response("list_playlist_items: missing 'items'")
            items.extend(i for i in raw_items if isinstance(i, dict))

            page += 1
            # `next` already carries every query parameter
            url = payload.get("next") or ""
            params = None

        logger.debug("[spotify] Playlist %s: %d items over %d page(s)", playlist_id, len(items), page)
        return items

    def list_newest_episodes(self, show_id: str, limit: int) -> List[CandidateEpisode]:
        if not config.SPOTIFY_ID_RE.match(show_id or ""):
            raise config_error(f"Invalid show ID: {show_id}")

        payload = self._request(
            "GET",
            config.SHOW_EPISODES_URL.format(show_id=_quote(show_id)),
            params={
                "limit": max(1, min(int(limit), _MAX_SHOW_EPISODES_LIMIT)),
                **self._market_params(),
            },
            name="list_newest_episodes",
        )
        raw_items = payload.get("items")
        if not isinstance(raw_items, list):
            raise malformed_response(f"list_newest_episodes({show_id}): missing 'items'")

        episodes: List[CandidateEpisode] = []
        for item in raw_items:
            if not isinstance(item, dict) or not item.get("uri"):
                continue
            episodes.append(
                CandidateEpisode(
                    uri=str(item["uri"]),
                    name=str(item.get("name") or ""),
                    show_id=show_id,
                )
            )
        return episodes

    def get_episode_progress(self, episode_ids: Sequence[str]) -> List[EpisodeProgress]:
        progress: List[EpisodeProgress] = []
        for chunk in _chunks(list(episode_ids), config.EPISODE_LOOKUP_BATCH):
            payload = self._request(
                "GET",
                config.EPISODES_URL,
                params={"ids": ",".join(chunk), **self._market_params()},
                name="get_episode_progress",
            )
            episodes = payload.get("episodes")
            if not isinstance(episodes, list):
                raise malformed_response("get_episode_progress: missing 'episodes'")

            for episode in episodes:
                # unavailable episodes come back as null
                if episode is None:
                    continue
                if not isinstance(episode, dict) or not episode.get("id"):
                    raise malformed_response("get_episode_progress: episode without id")
                resume = episode.get("resume_point")
                if not isinstance(resume, dict) or "fully_played" not in resume:
                    raise malformed_response(
                        f"get_episode_progress: episode {episode['id']} has no resume_point.fully_played"
                    )
                progress.append(
                    EpisodeProgress(
                        id=str(episode["id"]),
                        fully_played=bool(resume["fully_played"]),
                    )
                )
        return progress

    # -----------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------

    def add_to_playlist(self, playlist_id: str, uris: Sequence[str]) -> None:
        bad = [u for u in uris if not str(u).startswith(config.EPISODE_URI_PREFIX)]
        if bad:
            raise malformed_response(f"Invalid episode URI: {bad[0]}")

        url = config.PLAYLIST_TRACKS_URL.format(playlist_id=_quote(playlist_id))
        for chunk in _chunks(list(uris), config.PLAYLIST_MUTATION_BATCH):
            self._request("POST", url, json={"uris": chunk}, name="add_to_playlist")

    def remove_from_playlist(self, playlist_id: str, uris: Sequence[str]) -> None:
        url = config.PLAYLIST_TRACKS_URL.format(playlist_id=_quote(playlist_id))
        for chunk in _chunks(list(uris), config.PLAYLIST_MUTATION_BATCH):
            self._request(
                "DELETE",
                url,
                json={"tracks": [{"uri": u} for u in chunk]},
                name="remove_from_playlist",
            )

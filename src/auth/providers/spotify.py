from __future__ import annotations

from typing import Optional

import requests

import config
from auth.base import AuthHealthResult, AuthHealthStatus, AuthProvider
from env import Environment, get_env
from errors import ErrorKind, PodsyncError, auth_error
from logger import get_logger
from providers.spotify.api_manager import RetryPolicy
from providers.spotify.client import SpotifyTrackClient

_logger = get_logger("auth.spotify")


def refresh_access_token(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    timeout_sec: int = config.DEFAULT_REQUEST_TIMEOUT_SEC,
) -> str:
    """
    Exchange the long-lived refresh token for an access token.

    Raises:
        PodsyncError(auth_error): request failed or no access_token came back.
    """
    try:
        response = requests.post(
            config.TOKEN_URL,
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
            auth=(client_id, client_secret),
            timeout=timeout_sec,
        )
    except requests.RequestException as e:
        raise auth_error(f"Failed to refresh access token: {e}") from e

    if response.status_code != 200:
        detail = (response.text or "").strip()[:200] or f"status={response.status_code}"
        raise auth_error(
            f"Failed to refresh access token: {detail}", response.status_code
        )

    try:
        payload = response.json() or {}
    except ValueError:
        payload = {}
    token = payload.get("access_token") if isinstance(payload, dict) else None
    if not token:
        raise auth_error("Failed to refresh access token: no access token received", 401)

    granted = set(str(payload.get("scope") or "").split())
    missing = [s for s in config.SPOTIFY_OAUTH_SCOPES if s not in granted]
    if granted and missing:
        _logger.warning("Refresh token is missing scopes: %s", ", ".join(missing))
    return str(token)


class SpotifyAuthProvider(AuthProvider):
    name = "spotify"

    def __init__(self, env: Optional[Environment] = None) -> None:
        self.env = env or get_env()
        self._logger = get_logger("auth.spotify")

    def ensure_ready(self) -> None:
        _ = self._access_token()

    def build_client(self) -> SpotifyTrackClient:
        token = self._access_token()
        return SpotifyTrackClient(
            token,
            market=self.env.market,
            timeout_sec=self.env.request_timeout,
            retry=RetryPolicy(
                max_retries=self.env.max_retries,
                backoff_base_sec=self.env.backoff_base_sec,
            ),
        )

    def health_check(self) -> AuthHealthResult:
        """
        Validates credentials by refreshing the token and reading /me.
        """
        self._logger.info("oauth.check.start")

        try:
            me = self.build_client().get_current_user()
        except PodsyncError as e:
            if e.kind in (ErrorKind.AUTH, ErrorKind.CONFIG):
                self._logger.error("oauth.check.auth_invalid: %s", e.message)
                return AuthHealthResult(
                    provider=self.name,
                    status=AuthHealthStatus.AUTH_INVALID,
                    message=f"OAuth INVALID - {e.message}",
                )
            self._logger.error("oauth.check.failed: %s", e.message)
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.FAILED,
                message=f"OAuth check failed - {e.message}",
            )

        who = me.get("display_name") or me.get("id") or "unknown user"
        self._logger.info("oauth.check.ok (%s)", who)
        return AuthHealthResult(
            provider=self.name,
            status=AuthHealthStatus.OK,
            message=f"OAuth OK - connected as {who}",
        )

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _access_token(self) -> str:
        client_id, client_secret, refresh_token = self.env.credentials()
        self._logger.debug("Refreshing Spotify access token...")
        token = refresh_access_token(
            client_id,
            client_secret,
            refresh_token,
            timeout_sec=self.env.request_timeout,
        )
        self._logger.debug("Successfully refreshed Spotify access token")
        return token

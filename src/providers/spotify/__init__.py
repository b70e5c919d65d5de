from __future__ import annotations

from providers.spotify.api_manager import RetryPolicy, execute_with_retry
from providers.spotify.client import SpotifyTrackClient

__all__ = ["RetryPolicy", "SpotifyTrackClient", "execute_with_retry"]

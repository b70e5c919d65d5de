"""
config.py

Central constants for podsync.

This file intentionally contains ONLY:
- Constants
- Tunables (defaults)
- Regex patterns

It must NOT contain:
- Business logic
- API calls
- Reading environment variables

Runtime configuration (env vars, profiles) belongs in:
- env/env.py
- cli/cli_sync.py (profile loading)
"""

from __future__ import annotations

import re

# ============================================================
# SPOTIFY API ENDPOINTS / SCOPES
# ============================================================

API_BASE_URL = "https://api.spotify.com/v1"
TOKEN_URL = "https://accounts.spotify.com/api/token"

PLAYLIST_TRACKS_URL = API_BASE_URL + "/playlists/{playlist_id}/tracks"
SHOW_EPISODES_URL = API_BASE_URL + "/shows/{show_id}/episodes"
EPISODES_URL = API_BASE_URL + "/episodes"
ME_URL = API_BASE_URL + "/me"

# scopes the refresh token must have been granted with
SPOTIFY_OAUTH_SCOPES = [
    "playlist-modify-public",
    "playlist-modify-private",
    "playlist-read-private",
    "user-read-playback-position",
]

# ============================================================
# IDENTIFIERS
# ============================================================

SPOTIFY_ID_RE = re.compile(r"^[0-9a-zA-Z]{22}$")
EPISODE_URI_PREFIX = "spotify:episode:"

# ============================================================
# BATCH LIMITS (enforced by the Web API)
# ============================================================

PLAYLIST_PAGE_SIZE = 100
PLAYLIST_MUTATION_BATCH = 100
EPISODE_LOOKUP_BATCH = 50

# ============================================================
# RETENTION DEFAULTS (env may override)
# ============================================================

DEFAULT_MAX_AGE_DAYS = 30
DEFAULT_MAX_PER_SHOW = 3
# Most shows publish weekly at best; a larger limit only helps catch-up.
DEFAULT_NEW_EPISODES_PER_SHOW = 1

# ============================================================
# TRANSPORT DEFAULTS (env may override)
# ============================================================

DEFAULT_REQUEST_TIMEOUT_SEC = 30
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE_SEC = 1.0
DEFAULT_DISCOVERY_WORKERS = 4

TRANSIENT_STATUS_CODES = (429, 500, 502, 503, 504)

from __future__ import annotations

from typing import Callable, Dict, Optional

from auth.base import AuthProvider
from auth.providers.spotify import SpotifyAuthProvider
from env import Environment

# Factories, not instances: every run gets its own provider and client.
_PROVIDERS: Dict[str, Callable[[Optional[Environment]], AuthProvider]] = {
    "spotify": SpotifyAuthProvider,
}


def get_provider(name: str, env: Optional[Environment] = None) -> AuthProvider:
    key = (name or "").strip().lower()
    if key not in _PROVIDERS:
        raise ValueError(f"Unknown auth provider: {name}")
    return _PROVIDERS[key](env)

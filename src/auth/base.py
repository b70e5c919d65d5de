from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from providers.base import TrackClient


class AuthHealthStatus(str, Enum):
    OK = "ok"
    AUTH_INVALID = "auth_invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthHealthResult:
    provider: str
    status: AuthHealthStatus
    message: str


class AuthProvider(Protocol):
    """
    Provider interface. Keep it minimal.

    - ensure_ready() refreshes the access token (non-interactive)
    - build_client() returns a fresh, request-scoped TrackClient
    - health_check() performs a cheap authenticated call to validate auth
    """

    name: str

    def ensure_ready(self) -> None: ...

    def build_client(self) -> TrackClient: ...

    def health_check(self) -> AuthHealthResult: ...

from __future__ import annotations

from auth.base import AuthHealthResult
from auth.registry import get_provider


def check(provider_name: str = "spotify") -> AuthHealthResult:
    return get_provider(provider_name).health_check()

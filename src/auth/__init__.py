from __future__ import annotations

from auth.base import AuthHealthResult, AuthHealthStatus, AuthProvider
from auth.health import check
from auth.registry import get_provider

__all__ = [
    "AuthHealthResult",
    "AuthHealthStatus",
    "AuthProvider",
    "check",
    "get_provider",
]

from __future__ import annotations

from stages.discovery import DiscoveryResult, admit_episodes, discover_all, discover_show
from stages.retention import cap_per_show, expire_by_age, purge_completed
from stages.snapshot import build_snapshot

__all__ = [
    "DiscoveryResult",
    "admit_episodes",
    "build_snapshot",
    "cap_per_show",
    "discover_all",
    "discover_show",
    "expire_by_age",
    "purge_completed",
]

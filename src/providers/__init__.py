from __future__ import annotations

from providers.base import TrackClient
from providers.dry_run import DryRunTrackClient

__all__ = ["TrackClient", "DryRunTrackClient"]

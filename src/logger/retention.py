from __future__ import annotations

from pathlib import Path


def enforce_retention(log_dir: Path, keep: int) -> int:
    """
    Keep the newest ``keep`` run logs in ``log_dir``. Returns how many were deleted.
    """
    if keep <= 0 or not log_dir.exists():
        return 0

    logs = sorted(
        log_dir.glob("*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    deleted = 0
    for old in logs[keep:]:
        try:
            old.unlink()
            deleted += 1
        except OSError:
            continue
    return deleted

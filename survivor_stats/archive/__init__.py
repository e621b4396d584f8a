"""Append-only snapshot archive."""

from .store import AppendResult, MissingPeriodError, SnapshotStore, snapshot_filename

__all__ = [
    "AppendResult",
    "MissingPeriodError",
    "SnapshotStore",
    "snapshot_filename",
]

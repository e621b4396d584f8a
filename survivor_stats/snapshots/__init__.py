"""Snapshot construction."""

from .builder import SnapshotBuilder, classify_trend

__all__ = ["SnapshotBuilder", "classify_trend"]

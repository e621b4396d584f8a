"""Season snapshot archival, diffing and time-series analytics."""

__version__ = "0.1.0"

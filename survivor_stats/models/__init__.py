"""Domain models."""

from .episode import Episode, EpisodeSummary, MatchResult, Mover
from .participant import Participant
from .snapshot import Snapshot, content_signature

__all__ = [
    "Episode",
    "EpisodeSummary",
    "MatchResult",
    "Mover",
    "Participant",
    "Snapshot",
    "content_signature",
]

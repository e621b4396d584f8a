"""Episode derivation: snapshot diffs and match resolution."""

from .builder import build_episodes
from .diff import compute_movers, diff
from .matches import DRAW, MatchResolver, resolve_matches

__all__ = [
    "DRAW",
    "MatchResolver",
    "build_episodes",
    "compute_movers",
    "diff",
    "resolve_matches",
]

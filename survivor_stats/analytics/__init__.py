"""Season analytics over the snapshot history."""

from .dashboard import build_dashboard
from .factions import faction_standings, majority_trend
from .head_to_head import HeadToHead, PairMatrix, PairScore, parse_score_cell
from .timeseries import (
    PowerSeries,
    chaos_rank,
    chaos_series,
    classify_chaos,
    classify_momentum,
    mean_abs_delta,
    momentum,
    power_history,
    reliability,
    required_reliability_points,
)

__all__ = [
    "HeadToHead",
    "PairMatrix",
    "PairScore",
    "PowerSeries",
    "build_dashboard",
    "chaos_rank",
    "chaos_series",
    "classify_chaos",
    "classify_momentum",
    "faction_standings",
    "majority_trend",
    "mean_abs_delta",
    "momentum",
    "parse_score_cell",
    "power_history",
    "reliability",
    "required_reliability_points",
]

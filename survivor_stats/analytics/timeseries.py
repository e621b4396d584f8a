"""Per-participant power series and season-level volatility statistics.

Everything here is a pure function over an ordered list of archived
snapshots; nothing is cached or persisted as a source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy import stats as scipy_stats

from ..lifecycle import is_eliminated
from ..models.snapshot import Snapshot

MIN_MOMENTUM_POINTS = 5
MOMENTUM_THRESHOLD = 0.05
MIN_RELIABILITY_POINTS = 5
CHAOS_LOW_PERCENTILE = 33
CHAOS_HIGH_PERCENTILE = 66


@dataclass
class PowerSeries:
    """Ordered ``(period, power)`` points for one participant."""

    id: str
    name: str
    faction: str
    points: List[Tuple[int, float]]

    @property
    def values(self) -> List[float]:
        return [v for _, v in self.points]

    def __len__(self) -> int:
        return len(self.points)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "faction": self.faction,
            "series": [{"period": p, "power": v} for p, v in self.points],
        }


def power_history(snapshots: Sequence[Snapshot], start_period: int = 0) -> Dict[str, PowerSeries]:
    """Build every participant's power series.

    Periods at or after a participant's elimination are excluded; identity
    fields come from the latest snapshot the participant appears in.
    """
    history: Dict[str, PowerSeries] = {}
    for snap in sorted(snapshots, key=lambda s: s.period):
        if snap.period < start_period:
            continue
        for p in snap:
            series = history.get(p.id)
            if series is None:
                series = history[p.id] = PowerSeries(id=p.id, name=p.name, faction=p.faction, points=[])
            else:
                series.name, series.faction = p.name, p.faction
            if is_eliminated(p.elimination_period, snap.period):
                continue
            series.points.append((snap.period, float(p.power)))
    return history


def momentum(values: Sequence[float], min_points: int = MIN_MOMENTUM_POINTS) -> Optional[float]:
    """OLS slope of ``values`` against x = 1..n, or ``None`` below ``min_points``."""
    if len(values) < max(2, min_points):
        return None
    x = np.arange(1, len(values) + 1, dtype=float)
    y = np.asarray(values, dtype=float)
    result = scipy_stats.linregress(x, y)
    return float(result.slope)


def classify_momentum(slope: Optional[float], threshold: float = MOMENTUM_THRESHOLD) -> Optional[str]:
    if slope is None:
        return None
    if slope > threshold:
        return "up"
    if slope < -threshold:
        return "down"
    return "flat"


def required_reliability_points(periods_elapsed: int, cap: int = MIN_RELIABILITY_POINTS) -> int:
    """Points needed for a reliability figure: ``min(cap, periods_elapsed)``, at least 2."""
    return max(2, min(cap, periods_elapsed))


def reliability(values: Sequence[float], min_points: int = 2) -> Optional[float]:
    """Sample standard deviation of ``values``; ``None`` with too little data."""
    if len(values) < max(2, min_points):
        return None
    return float(np.std(np.asarray(values, dtype=float), ddof=1))


def mean_abs_delta(prev: Snapshot, curr: Snapshot) -> Optional[float]:
    """Mean |power change| over participants present in both snapshots."""
    diffs = []
    for p in curr:
        before = prev.get(p.id)
        if before is None:
            continue
        diffs.append(abs(p.power - before.power))
    if not diffs:
        return None
    return float(np.mean(diffs))


def chaos_series(snapshots: Sequence[Snapshot], start_period: int = 0) -> List[Tuple[int, float]]:
    """Chaos value for every consecutive pair, keyed by the later period."""
    ordered = [s for s in sorted(snapshots, key=lambda s: s.period) if s.period >= start_period]
    series: List[Tuple[int, float]] = []
    for prev, curr in zip(ordered, ordered[1:]):
        value = mean_abs_delta(prev, curr)
        if value is not None and np.isfinite(value):
            series.append((curr.period, value))
    return series


def classify_chaos(value: Optional[float], season: Sequence[float]) -> Optional[str]:
    """``LOW`` / ``MED`` / ``HIGH`` relative to the season's p33 and p66.

    Percentiles use linear interpolation between closest ranks.
    """
    if value is None or not len(season):
        return None
    arr = np.asarray(season, dtype=float)
    p33 = float(np.percentile(arr, CHAOS_LOW_PERCENTILE))
    p66 = float(np.percentile(arr, CHAOS_HIGH_PERCENTILE))
    if value <= p33:
        return "LOW"
    if value >= p66:
        return "HIGH"
    return "MED"


def chaos_rank(series: Sequence[Tuple[int, float]], period: int) -> Optional[int]:
    """1-based rank of ``period`` when the season is sorted by chaos, highest first."""
    ranked = sorted(series, key=lambda item: -item[1])
    for idx, (p, _) in enumerate(ranked, start=1):
        if p == period:
            return idx
    return None

"""Season dashboard: leaders, danger zone, momentum, reliability and chaos."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..lifecycle import active_participants
from ..models.participant import Participant
from ..models.snapshot import Snapshot
from .timeseries import (
    MIN_MOMENTUM_POINTS,
    MOMENTUM_THRESHOLD,
    chaos_rank,
    chaos_series,
    classify_chaos,
    classify_momentum,
    momentum,
    power_history,
    reliability,
    required_reliability_points,
)

logger = logging.getLogger(__name__)

DANGER_ZONE_SIZE = 3
HOT_COLD_SIZE = 3
HOT_COLD_WINDOW = 3


def _row(p: Participant, **extra) -> dict:
    data = {"id": p.id, "name": p.name, "faction": p.faction, "power": p.power}
    data.update(extra)
    return data


def _delta_against(current: List[Participant], base: Optional[Snapshot]) -> List[tuple]:
    if base is None:
        return []
    out = []
    for p in current:
        before = base.get(p.id)
        if before is not None:
            out.append((p, round(p.power - before.power, 2)))
    return out


def build_dashboard(
    snapshots: Sequence[Snapshot],
    start_period: int = 0,
    gain_base_period: int = 1,
    min_momentum_points: int = MIN_MOMENTUM_POINTS,
    momentum_threshold: float = MOMENTUM_THRESHOLD,
) -> Dict:
    """
    Compute the season dashboard from the ordered snapshot history.

    Args:
        snapshots: Contiguous archived snapshots
        start_period: First period included in series statistics
        gain_base_period: Baseline period for season gain/loss
        min_momentum_points: Minimum series length for a momentum slope
        momentum_threshold: Slope magnitude separating up/down from flat

    Returns:
        JSON-serializable dashboard dict (``{}`` for an empty archive)
    """
    ordered = sorted(snapshots, key=lambda s: s.period)
    if not ordered:
        return {}

    by_period = {s.period: s for s in ordered}
    latest = ordered[-1]
    prev = by_period.get(latest.period - 1)
    active = active_participants(latest.participants, latest.period)
    ranked = sorted(active, key=lambda p: -p.power)

    # Danger zone
    prev_deltas = dict((p.id, d) for p, d in _delta_against(active, prev))
    danger = [
        _row(p, delta_last=prev_deltas.get(p.id))
        for p in sorted(active, key=lambda p: p.power)[:DANGER_ZONE_SIZE]
    ]

    # Season gain / loss
    gains = _delta_against(active, by_period.get(gain_base_period))
    biggest_gain = max(gains, key=lambda item: item[1]) if gains else None
    biggest_loss = min(gains, key=lambda item: item[1]) if gains else None

    # Short-window movers
    window = _delta_against(active, by_period.get(max(0, latest.period - HOT_COLD_WINDOW)))
    hottest = sorted(window, key=lambda item: -item[1])[:HOT_COLD_SIZE]
    coldest = sorted(window, key=lambda item: item[1])[:HOT_COLD_SIZE]

    # Momentum / reliability
    history = power_history(ordered, start_period=start_period)
    # Period 0 is the baseline, not a played period.
    periods_elapsed = sum(1 for s in ordered if s.period >= max(start_period, 1))
    needed = required_reliability_points(periods_elapsed)
    momentum_rows = []
    reliability_rows = []
    for p in active:
        series = history.get(p.id)
        values = series.values if series is not None else []
        slope = momentum(values, min_points=min_momentum_points)
        if slope is not None:
            momentum_rows.append(
                _row(p, slope=round(slope, 4), trend=classify_momentum(slope, momentum_threshold), points=len(values))
            )
        sd = reliability(values, min_points=needed)
        if sd is not None:
            reliability_rows.append(_row(p, stdev=round(sd, 4), points=len(values)))
    momentum_rows.sort(key=lambda r: -r["slope"])
    reliability_rows.sort(key=lambda r: r["stdev"])

    # Chaos
    chaos = chaos_series(ordered, start_period=start_period)
    chaos_values = [v for _, v in chaos]
    chaos_latest = next((v for p, v in chaos if p == latest.period), None)
    last3 = [v for p, v in chaos if p >= max(start_period + 1, latest.period - 2)]

    logger.debug(
        "Dashboard for period %d: %d active, %d momentum rows, %d chaos points",
        latest.period,
        len(active),
        len(momentum_rows),
        len(chaos),
    )

    return {
        "period": latest.period,
        "periods_played": latest.period,
        "participants_total": len(latest),
        "participants_remaining": len(active),
        "leader": _row(ranked[0]) if ranked else None,
        "danger_zone": danger,
        "biggest_gain": _row(biggest_gain[0], delta=biggest_gain[1]) if biggest_gain else None,
        "biggest_loss": _row(biggest_loss[0], delta=biggest_loss[1]) if biggest_loss else None,
        "gain_base_period": gain_base_period,
        "hottest": [_row(p, delta=d) for p, d in hottest],
        "coldest": [_row(p, delta=d) for p, d in coldest],
        "momentum": momentum_rows,
        "most_reliable": reliability_rows[0] if reliability_rows else None,
        "most_unreliable": reliability_rows[-1] if reliability_rows else None,
        "reliability_min_points": needed,
        "chaos": {
            "latest": round(chaos_latest, 4) if chaos_latest is not None else None,
            "label": classify_chaos(chaos_latest, chaos_values),
            "season_min": round(min(chaos_values), 4) if chaos_values else None,
            "season_max": round(max(chaos_values), 4) if chaos_values else None,
            "last3_avg": round(sum(last3) / len(last3), 4) if last3 else None,
            "rank": chaos_rank(chaos, latest.period) if chaos_latest is not None else None,
            "series": [{"period": p, "value": round(v, 4)} for p, v in chaos],
        },
    }

"""Faction standings aggregated from the active members of a snapshot."""

from __future__ import annotations

from collections import Counter, OrderedDict
from typing import Dict, List, Optional

import numpy as np

from ..data.normalize import normalize_faction
from ..lifecycle import active_participants
from ..models.participant import Participant
from ..models.snapshot import Snapshot


def majority_trend(participants: List[Participant]) -> str:
    """Most common member trend; ``up`` wins ties over ``down``, ``down`` over ``flat``."""
    counts = Counter(p.trend for p in participants)
    up, down, flat = counts["up"], counts["down"], counts["flat"]
    if up >= down and up >= flat and up > 0:
        return "up"
    if down >= up and down >= flat and down > 0:
        return "down"
    return "flat"


def _member(p: Participant, rank: Optional[int] = None, delta: Optional[float] = None) -> dict:
    data = {"id": p.id, "name": p.name, "power": p.power, "trend": p.trend}
    if rank is not None:
        data["rank"] = rank
    if delta is not None:
        data["delta"] = delta
    return data


def faction_standings(snapshot: Snapshot, prev: Optional[Snapshot] = None) -> List[Dict]:
    """
    Rank-aggregated standings for every faction in ``snapshot``.

    Only members active at the snapshot's period count. Ranks are 1-based
    positions among all active participants by power.

    Args:
        snapshot: Snapshot to aggregate
        prev: Previous snapshot, used for the riser/faller deltas

    Returns:
        Faction rows sorted by average power descending
    """
    active = active_participants(snapshot.participants, snapshot.period)
    ranks = {p.id: idx for idx, p in enumerate(sorted(active, key=lambda x: -x.power), start=1)}

    groups: "OrderedDict[str, List[Participant]]" = OrderedDict()
    for p in active:
        groups.setdefault(normalize_faction(p.faction), []).append(p)

    rows = []
    for faction, members in groups.items():
        powers = np.array([m.power for m in members], dtype=float)
        mvp = max(members, key=lambda m: m.power)

        deltas = {}
        if prev is not None:
            for m in members:
                before = prev.get(m.id)
                if before is not None:
                    deltas[m.id] = round(m.power - before.power, 2)
        risers = [m for m in members if deltas.get(m.id, 0) > 0]
        fallers = [m for m in members if deltas.get(m.id, 0) < 0]
        riser = max(risers, key=lambda m: deltas[m.id]) if risers else None
        faller = min(fallers, key=lambda m: deltas[m.id]) if fallers else None

        wins = sum(m.stats.get("wins", 0.0) for m in members)
        duels = sum(m.stats.get("duels", 0.0) for m in members)
        reliabilities = [m.stats["reliability"] for m in members if "reliability" in m.stats]

        rows.append(
            {
                "faction": faction,
                "active_members": len(members),
                "power_sum": round(float(powers.sum()), 4),
                "power_avg": round(float(powers.mean()), 4),
                "mean_rank": round(float(np.mean([ranks[m.id] for m in members])), 2),
                "trend": majority_trend(members),
                "mvp": _member(mvp, ranks[mvp.id]),
                "riser": _member(riser, ranks[riser.id], deltas[riser.id]) if riser else None,
                "faller": _member(faller, ranks[faller.id], deltas[faller.id]) if faller else None,
                "win_pct": round(wins / duels, 4) if duels > 0 else None,
                "reliability_avg": round(float(np.mean(reliabilities)), 4) if reliabilities else None,
            }
        )

    rows.sort(key=lambda r: -r["power_avg"])
    return rows

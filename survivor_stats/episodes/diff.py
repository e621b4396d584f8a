"""Snapshot-to-snapshot comparison: deltas and ranked movers."""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, List, Optional

from ..data.normalize import normalize_faction
from ..models.episode import EpisodeSummary, Mover
from ..models.snapshot import Snapshot

TOP_MOVERS = 10
TOP_FACTION_MOVERS = 5


def compute_movers(prev: Optional[Snapshot], curr: Snapshot) -> List[Mover]:
    """One :class:`Mover` per participant in ``curr``, in ``curr`` order.

    ``delta`` is ``None`` for first appearances (absent from ``prev``).
    """
    movers: List[Mover] = []
    for p in curr:
        before = prev.get(p.id) if prev is not None else None
        prev_power = before.power if before is not None else None
        delta = round(p.power - prev_power, 2) if prev_power is not None else None
        movers.append(
            Mover(
                id=p.id,
                name=p.name,
                faction=normalize_faction(p.faction),
                curr_power=p.power,
                prev_power=prev_power,
                delta=delta,
            )
        )
    return movers


def rank_risers(movers: List[Mover], limit: Optional[int] = None) -> List[Mover]:
    ranked = sorted((m for m in movers if m.delta is not None), key=lambda m: -m.delta)
    return ranked[:limit] if limit is not None else ranked


def rank_fallers(movers: List[Mover], limit: Optional[int] = None) -> List[Mover]:
    ranked = sorted((m for m in movers if m.delta is not None), key=lambda m: m.delta)
    return ranked[:limit] if limit is not None else ranked


def diff(
    prev: Optional[Snapshot],
    curr: Snapshot,
    top_n: int = TOP_MOVERS,
    faction_top_n: int = TOP_FACTION_MOVERS,
) -> EpisodeSummary:
    """Compare two snapshots.

    Pure: the same two snapshots always produce an equal summary. Sorting is
    stable, so equal deltas keep ``curr`` ranking order.

    Args:
        prev: Earlier snapshot (``None`` treats everyone as new)
        curr: Later snapshot
        top_n: Size of the global riser/faller lists
        faction_top_n: Size of each per-faction riser/faller list

    Returns:
        EpisodeSummary with ``compared_players == len(curr)``
    """
    movers = compute_movers(prev, curr)

    by_faction: "OrderedDict[str, List[Mover]]" = OrderedDict()
    for m in movers:
        by_faction.setdefault(m.faction, []).append(m)

    faction_risers: Dict[str, List[Mover]] = {}
    faction_fallers: Dict[str, List[Mover]] = {}
    for faction, group in by_faction.items():
        faction_risers[faction] = rank_risers(group, faction_top_n)
        faction_fallers[faction] = rank_fallers(group, faction_top_n)

    risers = rank_risers(movers, top_n)
    fallers = rank_fallers(movers, top_n)
    with_delta = sum(1 for m in movers if m.delta is not None)

    return EpisodeSummary(
        compared_players=len(curr),
        with_delta=with_delta,
        new_entries=len(movers) - with_delta,
        top_riser=risers[0] if risers else None,
        top_faller=fallers[0] if fallers else None,
        risers=risers,
        fallers=fallers,
        faction_risers=faction_risers,
        faction_fallers=faction_fallers,
    )

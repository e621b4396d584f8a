"""Rebuilds every episode from the archive plus the event log."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..archive.store import MissingPeriodError
from ..models.episode import Episode
from ..models.snapshot import Snapshot
from .diff import TOP_FACTION_MOVERS, TOP_MOVERS, diff
from .matches import MatchResolver

logger = logging.getLogger(__name__)


def build_episodes(
    snapshots: Sequence[Snapshot],
    resolver: Optional[MatchResolver] = None,
    top_n: int = TOP_MOVERS,
    faction_top_n: int = TOP_FACTION_MOVERS,
) -> List[Episode]:
    """
    Compare each consecutive pair of snapshots.

    Args:
        snapshots: Contiguous snapshots ordered by period, starting at 0
        resolver: Match resolver joined in by period index
        top_n: Global movers list size
        faction_top_n: Per-faction movers list size

    Returns:
        One Episode per period >= 1
    """
    periods = [snap.period for snap in snapshots]
    if periods != list(range(len(periods))):
        missing = sorted(set(range(max(periods) + 1)) - set(periods))
        if missing:
            raise MissingPeriodError(missing)
        raise ValueError(f"Snapshots must be ordered by period without repeats; got {periods}")

    episodes: List[Episode] = []
    for prev, curr in zip(snapshots, snapshots[1:]):
        summary = diff(prev, curr, top_n=top_n, faction_top_n=faction_top_n)
        match = resolver.result_for(curr.period) if resolver is not None else None
        episodes.append(Episode(period=curr.period, summary=summary, match_result=match, date=curr.built_at))

    logger.info("Built %d episodes", len(episodes))
    return episodes

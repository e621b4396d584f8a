"""Builds the canonical per-period ranking from ingested roster records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from ..data.records import RosterRecord
from ..lifecycle import freeze_source, is_eliminated, merge_elimination
from ..models.participant import Participant
from ..models.snapshot import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_TREND_EPSILON = 0.05


def classify_trend(curr_power: float, prev_power: Optional[float], epsilon: float = DEFAULT_TREND_EPSILON) -> str:
    """``up`` / ``down`` / ``flat`` from the change against the previous value."""
    if prev_power is None:
        return "flat"
    delta = curr_power - prev_power
    if delta > epsilon:
        return "up"
    if delta < -epsilon:
        return "down"
    return "flat"


class SnapshotBuilder:
    """Maps roster records to a sorted, freeze-aware :class:`Snapshot`.

    Args:
        trend_epsilon: Minimum absolute power change for an up/down trend
        history: Archived snapshots available as freeze sources
    """

    def __init__(self, trend_epsilon: float = DEFAULT_TREND_EPSILON, history: Optional[Sequence[Snapshot]] = None):
        self.trend_epsilon = trend_epsilon
        self.history: List[Snapshot] = list(history or [])

    def build(
        self,
        records: Iterable[RosterRecord],
        prior_live: Optional[Snapshot] = None,
        last_archived: Optional[Snapshot] = None,
        period: Optional[int] = None,
        built_at: Optional[str] = None,
        source: Optional[str] = None,
        delimiter: Optional[str] = None,
    ) -> Snapshot:
        """
        Build the snapshot for the next period.

        Args:
            records: Valid roster records, in source order
            prior_live: The previously published live ranking, if any
            last_archived: Latest archived snapshot (``None`` for period 0)
            period: Override for the period index (defaults to the next one)
            built_at: ISO timestamp; defaults to now (UTC)
            source: Source identifier recorded in snapshot metadata
            delimiter: Delimiter the source table was parsed with

        Returns:
            Snapshot sorted by power descending, stable on input order
        """
        if period is None:
            period = last_archived.period + 1 if last_archived is not None else 0
        candidates = self._freeze_candidates(prior_live, last_archived)

        participants: List[Participant] = []
        seen = set()
        for record in records:
            if record.id in seen:
                logger.debug("Duplicate roster id %s ignored", record.id)
                continue
            seen.add(record.id)
            participants.append(self._participant(record, period, candidates, prior_live, last_archived))

        carried = 0
        if last_archived is not None:
            for prev in last_archived:
                if prev.id in seen or not is_eliminated(prev.elimination_period, period):
                    continue
                frozen = freeze_source(candidates, prev.id, prev.elimination_period, period) or prev
                participants.append(self._frozen(prev, frozen))
                seen.add(prev.id)
                carried += 1
        if carried:
            logger.debug("Carried %d eliminated participants forward into period %d", carried, period)

        ranked = sorted(participants, key=lambda p: -p.power)
        return Snapshot(
            period=period,
            participants=tuple(ranked),
            built_at=built_at or datetime.now(timezone.utc).isoformat(),
            source=source,
            delimiter=delimiter,
        )

    def _freeze_candidates(self, prior_live, last_archived) -> List[Snapshot]:
        by_period: Dict[int, Snapshot] = {s.period: s for s in self.history}
        if last_archived is not None:
            by_period[last_archived.period] = last_archived
        candidates = [by_period[p] for p in sorted(by_period)]
        # The live view is one more dated candidate; archived data wins a period tie.
        if prior_live is not None and prior_live.period not in by_period:
            candidates.append(prior_live)
        return candidates

    def _participant(self, record, period, candidates, prior_live, last_archived) -> Participant:
        known = None
        for snap in (last_archived, prior_live):
            if snap is not None and snap.get(record.id) is not None:
                known = snap.get(record.id)
                break
        elimination = merge_elimination(
            known.elimination_period if known is not None else None,
            record.elimination_period,
        )

        prev = last_archived.get(record.id) if last_archived is not None else None
        participant = Participant(
            id=record.id,
            name=record.name,
            faction=record.faction,
            power=record.power,
            power_adj=record.power_adj,
            power_raw=record.power_raw,
            elimination_period=elimination,
            trend=classify_trend(record.power, prev.power if prev is not None else None, self.trend_epsilon),
            stats=dict(record.stats),
            extras=dict(record.extras),
        )

        if is_eliminated(elimination, period):
            frozen = freeze_source(candidates, record.id, elimination, period)
            if frozen is not None:
                return self._frozen(participant, frozen)
        return participant

    @staticmethod
    def _frozen(participant: Participant, frozen: Participant) -> Participant:
        return participant.with_updates(
            power=frozen.power,
            power_adj=frozen.power_adj,
            power_raw=frozen.power_raw,
            trend=frozen.trend,
            stats=dict(frozen.stats),
        )

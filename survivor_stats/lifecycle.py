"""Elimination lifecycle: the single source of truth for "is this participant out?".

Per participant the state machine is ``ACTIVE -> ELIMINATED`` (terminal). The
transition happens at the first period ``p`` with ``p >= elimination_period``;
``elimination_period = None`` means never eliminated. From that period on the
participant keeps appearing in rosters with frozen stats, but is excluded from
every "active" aggregate.

Every other module asks this one whether a participant is eliminated; nothing
else re-derives it.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Sequence


class ParticipantState(str, Enum):
    ACTIVE = "active"
    ELIMINATED = "eliminated"


def state_at(elimination_period: Optional[int], period: int) -> ParticipantState:
    """Lifecycle state for a participant at ``period``."""
    if elimination_period is not None and period >= elimination_period:
        return ParticipantState.ELIMINATED
    return ParticipantState.ACTIVE


def is_eliminated(elimination_period: Optional[int], period: int) -> bool:
    return state_at(elimination_period, period) is ParticipantState.ELIMINATED


def is_active(participant, period: int) -> bool:
    return not is_eliminated(participant.elimination_period, period)


def active_participants(participants: Iterable, period: int) -> List:
    """Participants still active at ``period``, order preserved."""
    return [p for p in participants if is_active(p, period)]


def merge_elimination(previous: Optional[int], observed: Optional[int]) -> Optional[int]:
    """Combine a previously known elimination period with a newly observed one.

    ELIMINATED is terminal: a blank value in later source data never clears a
    known elimination. A new non-blank value replaces the old one (source
    corrections).
    """
    if observed is not None:
        return observed
    return previous


def freeze_source(history: Sequence, participant_id: str, elimination_period: int, before_period: int):
    """Find the participant's last recorded state at or before elimination.

    Args:
        history: Snapshots (anything with ``period`` and ``get(id)``), any order
        participant_id: Participant to look up
        elimination_period: The participant's elimination period
        before_period: Period being built; only strictly earlier snapshots count

    Returns:
        The participant entry from the latest qualifying snapshot, or ``None``
        when the participant was never recorded in that window.
    """
    bound = min(elimination_period, before_period - 1)
    best = None
    best_period = None
    for snapshot in history:
        if snapshot is None or snapshot.period > bound:
            continue
        entry = snapshot.get(participant_id)
        if entry is None:
            continue
        if best_period is None or snapshot.period > best_period:
            best, best_period = entry, snapshot.period
    return best

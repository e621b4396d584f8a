"""Episode models: per-period comparison records derived from two snapshots."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Mover:
    """A participant's power change between two consecutive snapshots."""

    id: str
    name: str
    faction: str
    curr_power: float
    prev_power: Optional[float] = None
    delta: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "faction": self.faction,
            "curr_power": self.curr_power,
            "prev_power": self.prev_power,
            "delta": self.delta,
        }


@dataclass(frozen=True)
class MatchResult:
    """One period's authoritative head-to-head outcome."""

    period: int
    match_id: str
    score_a: float
    score_b: float
    winner: str
    margin: float
    faction_a: str = "A"
    faction_b: str = "B"
    game_type: Optional[str] = None

    @property
    def is_draw(self) -> bool:
        return self.score_a == self.score_b

    @property
    def total(self) -> float:
        return self.score_a + self.score_b

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "match_id": self.match_id,
            "scores": {self.faction_a: self.score_a, self.faction_b: self.score_b},
            "winner": self.winner,
            "margin": self.margin,
            "game_type": self.game_type,
        }


@dataclass(frozen=True)
class EpisodeSummary:
    """Result of comparing two snapshots.

    ``risers`` / ``fallers`` are the global top-N lists; the ``faction_*``
    maps hold the per-faction top-N lists keyed by faction name.
    """

    compared_players: int
    with_delta: int
    new_entries: int
    top_riser: Optional[Mover]
    top_faller: Optional[Mover]
    risers: List[Mover] = field(default_factory=list)
    fallers: List[Mover] = field(default_factory=list)
    faction_risers: Dict[str, List[Mover]] = field(default_factory=dict)
    faction_fallers: Dict[str, List[Mover]] = field(default_factory=dict)

    def biggest_rise(self, faction: str) -> Optional[Mover]:
        movers = self.faction_risers.get(faction) or []
        return movers[0] if movers else None

    def biggest_fall(self, faction: str) -> Optional[Mover]:
        movers = self.faction_fallers.get(faction) or []
        return movers[0] if movers else None

    @property
    def factions(self) -> List[str]:
        return sorted(set(self.faction_risers) | set(self.faction_fallers))

    def to_dict(self) -> dict:
        def _opt(mover):
            return mover.to_dict() if mover is not None else None

        return {
            "compared_players": self.compared_players,
            "with_delta": self.with_delta,
            "new_entries": self.new_entries,
            "top_riser": _opt(self.top_riser),
            "top_faller": _opt(self.top_faller),
            "faction_top_movers": {
                f: {"biggest_rise": _opt(self.biggest_rise(f)), "biggest_fall": _opt(self.biggest_fall(f))}
                for f in self.factions
            },
        }

    def movers_dict(self) -> dict:
        return {
            "risers": [m.to_dict() for m in self.risers],
            "fallers": [m.to_dict() for m in self.fallers],
            "by_faction": {
                f: {
                    "risers": [m.to_dict() for m in self.faction_risers.get(f, [])],
                    "fallers": [m.to_dict() for m in self.faction_fallers.get(f, [])],
                }
                for f in self.factions
            },
        }


@dataclass(frozen=True)
class Episode:
    """Derived report for period ``period`` (always >= 1)."""

    period: int
    summary: EpisodeSummary
    match_result: Optional[MatchResult] = None
    date: Optional[str] = None

    def __post_init__(self):
        if self.period < 1:
            raise ValueError(f"Episode period must be >= 1, got {self.period}")

    @property
    def label(self) -> str:
        return f"Episode {self.period}"

    def to_dict(self) -> dict:
        summary = self.summary.to_dict()
        summary["match_result"] = self.match_result.to_dict() if self.match_result else None
        return {
            "period": self.period,
            "label": self.label,
            "date": self.date,
            "prev_snapshot": f"ep_{self.period - 1:03d}",
            "curr_snapshot": f"ep_{self.period:03d}",
            "summary": summary,
            "movers": self.summary.movers_dict(),
        }

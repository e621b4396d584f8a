"""Participant model for per-period rankings."""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from ..lifecycle import is_eliminated

TRENDS = ("up", "down", "flat")


def _opt_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _opt_int(value) -> Optional[int]:
    n = _opt_float(value)
    if n is None:
        return None
    return int(round(n))


@dataclass(frozen=True)
class Participant:
    """One competitor's state as recorded in a single snapshot."""

    id: str
    name: str
    faction: str
    power: float = 0.0
    power_adj: Optional[float] = None
    power_raw: Optional[float] = None
    elimination_period: Optional[int] = None
    trend: str = "flat"
    stats: Dict[str, float] = field(default_factory=dict)
    extras: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate participant data."""
        if not self.id:
            raise ValueError("Participant id must be non-empty")
        if self.trend not in TRENDS:
            raise ValueError(f"Invalid trend: {self.trend}")

    def with_updates(self, **changes) -> "Participant":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self, period: Optional[int] = None) -> dict:
        """Convert participant to dictionary.

        ``is_eliminated`` is only emitted when ``period`` is given since it is
        derived from ``elimination_period`` and the period being rendered.
        """
        data = {
            "id": self.id,
            "name": self.name,
            "faction": self.faction,
            "power": self.power,
            "power_adj": self.power_adj,
            "power_raw": self.power_raw,
            "elimination_period": self.elimination_period,
            "trend": self.trend,
            "stats": dict(self.stats),
            "extras": dict(self.extras),
        }
        if period is not None:
            data["is_eliminated"] = is_eliminated(self.elimination_period, period)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        """Create participant from dictionary.

        Accepts the legacy archive row shape (``team`` / ``eliminatedEpisode``)
        as well as the current one.
        """
        faction = data.get("faction")
        if faction is None:
            faction = data.get("team", "")
        elim = data.get("elimination_period")
        if elim is None:
            elim = data.get("eliminatedEpisode")
        elim = _opt_int(elim)
        if elim is not None and elim <= 0:
            elim = None
        trend = data.get("trend") or "flat"
        if trend not in TRENDS:
            trend = "flat"
        stats = data.get("stats") or {}
        extras = data.get("extras") or {}
        return cls(
            id=str(data["id"]).strip(),
            name=str(data.get("name", "")).strip(),
            faction=str(faction or "").strip(),
            power=_opt_float(data.get("power")) or 0.0,
            power_adj=_opt_float(data.get("power_adj")),
            power_raw=_opt_float(data.get("power_raw")),
            elimination_period=elim,
            trend=trend,
            stats={k: float(v) for k, v in stats.items() if _opt_float(v) is not None},
            extras={str(k): str(v) for k, v in extras.items()},
        )

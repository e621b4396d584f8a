"""Typed records resolved from raw tables.

Source exports vary in column naming from week to week, so every known field
is looked up through a synonym table exactly once, here. Downstream code only
ever sees :class:`RosterRecord` / :class:`MatchRow`; anything not recognised
lands in the record's ``extras`` bucket untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .normalize import clean_cell, normalize_key
from .tabular import Table, coerce_column, coerce_int, coerce_number

logger = logging.getLogger(__name__)

# Synonym tables (normalized spellings).
ID_KEYS = ("id", "playerid", "player_id")
NAME_KEYS = ("name", "playername", "player_name", "player")
FACTION_KEYS = ("faction", "team", "teamname", "team_name")
ADJUSTED_POWER_KEYS = (
    "adjusted_pr",
    "adjustedpr",
    "adjusted",
    "adjusted_power",
    "adjustedpower",
    "power_adjusted",
    "adj_power",
    "adjpower",
    "power_adj",
    "poweradj",
    "adjusted_pow",
    "adjusted_rating",
    "adjustedrating",
    "rating_adjusted",
)
RAW_POWER_KEYS = (
    "power",
    "powerrating",
    "power_rating",
    "currentpower",
    "current_power",
    "power_score",
    "rating",
    "power_raw",
)
ELIMINATION_KEYS = (
    "eliminatedepisode",
    "eliminated_episode",
    "eliminatedep",
    "eliminated_ep",
    "elimination_period",
    "eliminated_period",
    "elimination_episode",
)

# Numeric roster stats carried on the participant, keyed by canonical name.
STAT_KEYS: Dict[str, Tuple[str, ...]] = {
    "wins": ("wins", "wins_total"),
    "duels": ("totalduels", "total_duels", "duels"),
    "win_pct": ("win_pct", "winpct", "win_percentage", "win_percent"),
    "clutch": ("clutchrating", "clutch_rating", "clutch"),
    "choke_rate": ("chokerate_whenarrivedfirst", "chokerate", "choke_rate", "choke"),
    "reliability": ("reliability",),
    "arrive_first_pct": ("arrivefirst_pct", "arrive_first_pct", "arrive_firstpct"),
    "final_pts_played": ("finalptsplayed", "final_pts_played", "final_ptsplayed"),
    "final_pts_won": ("finalptswon", "final_pts_won"),
    "tiebreak_played": ("tiebreakplayed", "tiebreaksplayed", "tiebreak_played"),
    "tiebreak_won": ("tiebreakwon", "tiebreakswon", "tiebreak_won"),
}

PERIOD_KEYS = ("episodeid", "episode_id", "episode", "period", "period_id", "periodid")
MATCH_ID_KEYS = ("teammatchid", "team_match_id", "match_id", "matchid", "match")
SIDE_A_WON_KEYS = ("redwon", "red_won", "faction_a_won", "side_a_won", "a_won")
SIDE_B_WON_KEYS = ("bluewon", "blue_won", "faction_b_won", "side_b_won", "b_won")
GAME_TYPE_KEYS = ("gametype", "game_type")

_ROSTER_KNOWN = set(ID_KEYS + NAME_KEYS + FACTION_KEYS + ADJUSTED_POWER_KEYS + RAW_POWER_KEYS + ELIMINATION_KEYS)
for _keys in STAT_KEYS.values():
    _ROSTER_KNOWN.update(_keys)
_MATCH_KNOWN = set(PERIOD_KEYS + MATCH_ID_KEYS + SIDE_A_WON_KEYS + SIDE_B_WON_KEYS + GAME_TYPE_KEYS)


def pick(row: Dict[str, str], keys: Iterable[str]) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(key, value)`` for the first synonym with a non-empty value."""
    for k in keys:
        k = normalize_key(k)
        v = row.get(k)
        if v is not None and clean_cell(v) != "":
            return k, clean_cell(v)
    return None, None


def pick_value(row: Dict[str, str], keys: Iterable[str]) -> Optional[str]:
    return pick(row, keys)[1]


@dataclass
class RosterRecord:
    """One competitor row from a roster / ranking export."""

    id: str
    name: str
    faction: str
    power_adj: Optional[float] = None
    power_raw: Optional[float] = None
    elimination_period: Optional[int] = None
    stats: Dict[str, float] = field(default_factory=dict)
    extras: Dict[str, str] = field(default_factory=dict)

    @property
    def power(self) -> float:
        """Adjusted power when present, else raw power, else zero."""
        if self.power_adj is not None:
            return self.power_adj
        if self.power_raw is not None:
            return self.power_raw
        return 0.0

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> Optional["RosterRecord"]:
        """Resolve a normalized row; ``None`` when id/name/faction is missing."""
        pid = pick_value(row, ID_KEYS)
        name = pick_value(row, NAME_KEYS)
        faction = pick_value(row, FACTION_KEYS)
        if not pid or not name or not faction:
            return None

        adj_key, adj_raw = pick(row, ADJUSTED_POWER_KEYS)
        raw_key, raw_raw = pick(row, RAW_POWER_KEYS)
        elim = coerce_int(pick_value(row, ELIMINATION_KEYS))
        if elim is not None and elim <= 0:
            elim = None

        stats: Dict[str, float] = {}
        for stat, keys in STAT_KEYS.items():
            key, raw = pick(row, keys)
            if key is None:
                continue
            value = coerce_column(key, raw)
            if value is not None:
                stats[stat] = value
        played, won = stats.get("tiebreak_played"), stats.get("tiebreak_won")
        if played and won is not None:
            stats["tiebreak_win_pct"] = round(won / played, 4)

        extras = {k: v for k, v in row.items() if k not in _ROSTER_KNOWN and v != ""}

        return cls(
            id=pid,
            name=name,
            faction=faction,
            power_adj=coerce_number(adj_raw) if adj_key else None,
            power_raw=coerce_number(raw_raw) if raw_key else None,
            elimination_period=elim,
            stats=stats,
            extras=extras,
        )


@dataclass
class MatchRow:
    """One head-to-head sub-contest from the event log."""

    period: int
    match_id: str
    side_a_won: float = 0.0
    side_b_won: float = 0.0
    game_type: Optional[str] = None
    extras: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, str]) -> Optional["MatchRow"]:
        """Resolve a normalized row; ``None`` when it carries no period."""
        period = coerce_int(pick_value(row, PERIOD_KEYS))
        if period is None:
            return None
        match_id = pick_value(row, MATCH_ID_KEYS) or "unknown"
        return cls(
            period=period,
            match_id=match_id,
            side_a_won=coerce_number(pick_value(row, SIDE_A_WON_KEYS)) or 0.0,
            side_b_won=coerce_number(pick_value(row, SIDE_B_WON_KEYS)) or 0.0,
            game_type=pick_value(row, GAME_TYPE_KEYS),
            extras={k: v for k, v in row.items() if k not in _MATCH_KNOWN and v != ""},
        )


def roster_records(rows: Sequence[Dict[str, str]]) -> List[RosterRecord]:
    """Map raw roster rows to records, silently dropping incomplete rows."""
    out: List[RosterRecord] = []
    dropped = 0
    for row in rows:
        record = RosterRecord.from_row(row)
        if record is None:
            dropped += 1
            continue
        out.append(record)
    if dropped:
        logger.debug("Excluded %d roster rows missing id/name/faction", dropped)
    return out


def match_rows(rows: Sequence[Dict[str, str]]) -> List[MatchRow]:
    """Map raw event-log rows to :class:`MatchRow`, skipping rows with no period."""
    out: List[MatchRow] = []
    for row in rows:
        record = MatchRow.from_row(row)
        if record is not None:
            out.append(record)
    return out


def roster_records_from_table(table: Table) -> List[RosterRecord]:
    return roster_records(table.rows)


def match_rows_from_table(table: Table) -> List[MatchRow]:
    return match_rows(table.rows)

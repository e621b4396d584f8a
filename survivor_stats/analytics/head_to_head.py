"""Player-vs-player head-to-head records from pairwise matrix exports.

The score matrix is laid out with two header rows and two header columns::

    ,PlayerID,13,14
    PlayerID,PlayerName,Alice,Bob
    13,Alice,,2-1
    14,Bob,1-2,

Each body cell holds the row player's record against the column player as
``"wins-losses"``. An optional dominance matrix with the same layout holds one
number per pair.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..data.normalize import clean_cell
from ..data.tabular import coerce_number

logger = logging.getLogger(__name__)

SCORE_CELL_RE = re.compile(r"^(\d+)\s*[-\u2013]\s*(\d+)$")


@dataclass(frozen=True)
class PairScore:
    """Row player's record against the column player."""

    wins: int
    losses: int

    @property
    def total(self) -> int:
        return self.wins + self.losses

    @property
    def win_pct(self) -> Optional[float]:
        return round(self.wins / self.total, 4) if self.total else None

    @property
    def loss_pct(self) -> Optional[float]:
        return round(self.losses / self.total, 4) if self.total else None

    @property
    def raw(self) -> str:
        return f"{self.wins}-{self.losses}"

    def swapped(self) -> "PairScore":
        return PairScore(wins=self.losses, losses=self.wins)

    def to_dict(self) -> dict:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "win_pct": self.win_pct,
            "loss_pct": self.loss_pct,
            "total": self.total,
            "raw": self.raw,
        }


def parse_score_cell(value) -> Optional[PairScore]:
    """Parse ``"2-0"`` (hyphen or en dash); ``None`` for anything else."""
    match = SCORE_CELL_RE.match(clean_cell(value))
    if not match:
        return None
    return PairScore(wins=int(match.group(1)), losses=int(match.group(2)))


@dataclass
class PairMatrix:
    """A square-ish pairwise table keyed by row and column participant ids."""

    col_ids: List[str]
    col_names: List[str]
    row_ids: List[str] = field(default_factory=list)
    row_names: List[str] = field(default_factory=list)
    cells: List[List[str]] = field(default_factory=list)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[str]]) -> Optional["PairMatrix"]:
        """Build from raw rows; ``None`` when there is no body row."""
        if len(rows) < 3:
            return None
        matrix = cls(
            col_ids=[clean_cell(c) for c in rows[0][2:]],
            col_names=[clean_cell(c) for c in rows[1][2:]],
        )
        for row in rows[2:]:
            rid = clean_cell(row[0]) if row else ""
            if not rid:
                continue
            matrix.row_ids.append(rid)
            matrix.row_names.append(clean_cell(row[1]) if len(row) > 1 else "")
            matrix.cells.append(list(row[2:]))
        return matrix

    def pairs(self) -> Iterator[Tuple[str, str, str]]:
        """Yield ``(row_id, col_id, cell)`` for every non-empty body cell."""
        for i, row_id in enumerate(self.row_ids):
            cells = self.cells[i]
            for j, col_id in enumerate(self.col_ids):
                if not col_id or j >= len(cells):
                    continue
                cell = clean_cell(cells[j])
                if cell:
                    yield row_id, col_id, cell

    def names(self) -> Dict[str, str]:
        """Participant id to name, first non-empty name wins."""
        out: Dict[str, str] = {}
        for ids, names in ((self.row_ids, self.row_names), (self.col_ids, self.col_names)):
            for idx, pid in enumerate(ids):
                if not pid:
                    continue
                name = names[idx] if idx < len(names) else ""
                if not out.get(pid):
                    out[pid] = name
        return out


class HeadToHead:
    """Pairwise records and optional dominance values between participants."""

    def __init__(self, score: PairMatrix, dominance: Optional[PairMatrix] = None):
        self.players: Dict[str, str] = score.names()
        if dominance is not None:
            for pid, name in dominance.names().items():
                if not self.players.get(pid):
                    self.players[pid] = name

        self.scores: Dict[Tuple[str, str], PairScore] = {}
        skipped = 0
        for row_id, col_id, cell in score.pairs():
            parsed = parse_score_cell(cell)
            if parsed is None:
                skipped += 1
                continue
            self.scores[(row_id, col_id)] = parsed
        if skipped:
            logger.warning("Skipped %d unparseable score cells", skipped)

        self.dominance: Dict[Tuple[str, str], float] = {}
        if dominance is not None:
            for row_id, col_id, cell in dominance.pairs():
                value = coerce_number(cell)
                if value is not None:
                    self.dominance[(row_id, col_id)] = round(value, 4)

    def record(self, player_id: str, opponent_id: str) -> Optional[PairScore]:
        """Record of ``player_id`` against ``opponent_id``.

        Falls back to the mirrored cell when only the opponent's row is filled.
        """
        direct = self.scores.get((player_id, opponent_id))
        if direct is not None:
            return direct
        mirrored = self.scores.get((opponent_id, player_id))
        return mirrored.swapped() if mirrored is not None else None

    def to_dict(self) -> dict:
        return {
            "players": {pid: {"id": pid, "name": name} for pid, name in self.players.items()},
            "score": {f"{a}|{b}": s.to_dict() for (a, b), s in self.scores.items()},
            "dominance": {f"{a}|{b}": v for (a, b), v in self.dominance.items()},
        }

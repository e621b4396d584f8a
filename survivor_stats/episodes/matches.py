"""Resolves the event log into one authoritative match result per period."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

import pandas as pd

from ..data.records import MatchRow
from ..models.episode import MatchResult

logger = logging.getLogger(__name__)

DRAW = "Draw"


class MatchResolver:
    """Aggregates head-to-head sub-contests into per-period results.

    Rows are grouped by period, then by match id within the period; each
    row's side-A / side-B win indicators are summed into the match score.
    When a period holds several matches, the one with the greatest combined
    score decides it (first in input order on ties).
    """

    def __init__(self, rows: Iterable[MatchRow], faction_a: str = "A", faction_b: str = "B"):
        self.faction_a = faction_a
        self.faction_b = faction_b
        self._results = self._resolve(list(rows))

    def _resolve(self, rows) -> Dict[int, MatchResult]:
        if not rows:
            return {}

        df = pd.DataFrame(
            {
                "period": [r.period for r in rows],
                "match_id": [(r.match_id or "unknown") for r in rows],
                "score_a": [float(r.side_a_won) for r in rows],
                "score_b": [float(r.side_b_won) for r in rows],
                "game_type": [r.game_type for r in rows],
            }
        )
        df["order"] = range(len(df))

        grouped = (
            df.groupby(["period", "match_id"], sort=False)
            .agg(
                score_a=("score_a", "sum"),
                score_b=("score_b", "sum"),
                order=("order", "min"),
                game_type=("game_type", "first"),
            )
            .reset_index()
        )
        grouped["total"] = grouped["score_a"] + grouped["score_b"]
        grouped = grouped.sort_values(["period", "total", "order"], ascending=[True, False, True], kind="mergesort")
        best = grouped.drop_duplicates(subset="period", keep="first")

        results: Dict[int, MatchResult] = {}
        for row in best.itertuples(index=False):
            period = int(row.period)
            results[period] = self._result(
                period,
                str(row.match_id),
                float(row.score_a),
                float(row.score_b),
                row.game_type if isinstance(row.game_type, str) else None,
            )
        logger.debug("Resolved %d periods from %d match rows", len(results), len(rows))
        return results

    def _result(self, period, match_id, score_a, score_b, game_type) -> MatchResult:
        if score_a > score_b:
            winner = self.faction_a
        elif score_b > score_a:
            winner = self.faction_b
        else:
            winner = DRAW
        return MatchResult(
            period=period,
            match_id=match_id,
            score_a=score_a,
            score_b=score_b,
            winner=winner,
            margin=abs(score_a - score_b),
            faction_a=self.faction_a,
            faction_b=self.faction_b,
            game_type=game_type,
        )

    def result_for(self, period: int) -> Optional[MatchResult]:
        """Result for ``period``; ``None`` when the log has no rows for it."""
        return self._results.get(period)

    def max_period(self) -> Optional[int]:
        return max(self._results) if self._results else None

    def periods(self):
        return sorted(self._results)

    def to_dict(self) -> dict:
        return {str(p): self._results[p].to_dict() for p in self.periods()}


def resolve_matches(rows: Iterable[MatchRow], faction_a: str = "A", faction_b: str = "B") -> Dict[int, MatchResult]:
    resolver = MatchResolver(rows, faction_a=faction_a, faction_b=faction_b)
    return {p: resolver.result_for(p) for p in resolver.periods()}

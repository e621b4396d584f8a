"""Season pipeline: roster ingestion, archival, episodes and analytics."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from ..analytics.dashboard import build_dashboard
from ..analytics.factions import faction_standings
from ..analytics.head_to_head import HeadToHead, PairMatrix
from ..analytics.timeseries import power_history
from ..archive.store import AppendResult, MissingPeriodError, SnapshotStore
from ..data.loader import DataLoader
from ..data.records import match_rows_from_table, roster_records_from_table
from ..data.tabular import MalformedInputError, Table, read_rows, read_table
from ..data.validators import validate_match_log, validate_pair_matrix, validate_roster_table
from ..episodes.builder import build_episodes
from ..episodes.matches import MatchResolver
from ..models.snapshot import Snapshot
from ..snapshots.builder import SnapshotBuilder

logger = logging.getLogger(__name__)

PERIOD_TABLE_RE = re.compile(r"^players_ep_(\d+)\.(csv|tsv|txt)$", re.IGNORECASE)


@dataclass
class SeasonConfig:
    """Configuration for a season pipeline run."""

    archive_dir: str = "data/archive"
    output_dir: str = "data/published"
    roster_path: Optional[str] = "data/players.csv"
    match_log_path: Optional[str] = None
    h2h_score_path: Optional[str] = None
    h2h_dominance_path: Optional[str] = None

    faction_a: str = "A"
    faction_b: str = "B"

    trend_epsilon: float = 0.05
    momentum_threshold: float = 0.05
    min_momentum_points: int = 5
    top_movers: int = 10
    top_faction_movers: int = 5
    analytics_start_period: int = 0
    gain_base_period: int = 1
    strict_validation: bool = True


class SeasonPipeline:
    """Runs the season workflow against an archive and a published directory."""

    def __init__(self, config: Optional[SeasonConfig] = None):
        self.config = config or SeasonConfig()
        self.store = SnapshotStore(self.config.archive_dir)
        self.output_dir = Path(self.config.output_dir)

    # ------------------------------------------------------------------
    # Ingestion / archival
    # ------------------------------------------------------------------

    def load_roster(self, path=None) -> Table:
        path = path or self.config.roster_path
        if not path:
            raise MalformedInputError("No roster table configured")
        table = read_table(path)
        self._assert_valid(str(path), validate_roster_table(table))
        return table

    def archive_roster(self, roster_path=None) -> AppendResult:
        """Ingest the roster table and append a snapshot when it changed."""
        table = self.load_roster(roster_path)
        history = self.store.read_all()
        result, snapshot = self._archive_table(table, history)
        self._write_json("rankings.json", snapshot.to_dict())
        return result

    def _archive_table(self, table: Table, history: List[Snapshot]):
        records = roster_records_from_table(table)
        if not records:
            raise MalformedInputError(f"{table.source or 'roster table'} has no rows with id, name and faction")

        last_archived = history[-1] if history else None
        builder = SnapshotBuilder(trend_epsilon=self.config.trend_epsilon, history=history)
        snapshot = builder.build(
            records,
            prior_live=self._load_live(last_archived),
            last_archived=last_archived,
            source=Path(table.source).name if table.source else None,
            delimiter=table.delimiter,
        )
        result = self.store.append(snapshot)
        if result.appended:
            history.append(snapshot)
            return result, snapshot
        return result, last_archived

    def _load_live(self, last_archived: Optional[Snapshot]) -> Optional[Snapshot]:
        path = self.output_dir / "rankings.json"
        if not path.exists():
            return None
        payload = DataLoader.load_json(path)
        fallback = last_archived.period if last_archived is not None else 0
        try:
            if isinstance(payload, list):
                return Snapshot.from_dict(payload, period=fallback)
            return Snapshot.from_dict(payload)
        except (KeyError, ValueError) as exc:
            logger.warning("Ignoring unreadable live rankings %s: %s", path, exc)
            return None

    def backfill(self, source_dir) -> List[AppendResult]:
        """
        Rebuild the archive from per-period tables ``players_ep_NNN.csv``.

        Every table is parsed and validated before the first write; gaps in
        the table numbering are reported together.

        Args:
            source_dir: Directory holding the per-period tables

        Returns:
            One AppendResult per table, in period order
        """
        source = Path(source_dir)
        tables: Dict[int, Path] = {}
        if source.exists():
            for entry in source.iterdir():
                match = PERIOD_TABLE_RE.match(entry.name)
                if match and entry.is_file():
                    tables[int(match.group(1))] = entry
        if not tables:
            raise MalformedInputError(f"No players_ep_NNN tables found in {source}")

        start = self.store.next_period()
        missing = [p for p in range(start, max(tables) + 1) if p not in tables]
        if missing:
            raise MissingPeriodError(missing, f"Backfill tables missing for period(s): {', '.join(map(str, missing))}")

        parsed = []
        for period in range(start, max(tables) + 1):
            table = self.load_roster(tables[period])
            if not roster_records_from_table(table):
                raise MalformedInputError(f"{tables[period]} has no rows with id, name and faction")
            parsed.append((period, table))

        history = self.store.read_all()
        results = []
        for period, table in parsed:
            result, snapshot = self._archive_table(table, history)
            if result.period != period:
                logger.warning("Table for period %d archived as period %d", period, result.period)
            self._write_json("rankings.json", snapshot.to_dict())
            results.append(result)
        return results

    # ------------------------------------------------------------------
    # Derived artifacts
    # ------------------------------------------------------------------

    def load_match_resolver(self) -> Optional[MatchResolver]:
        path = self.config.match_log_path
        if not path:
            return None
        table = read_table(path)
        self._assert_valid(str(path), validate_match_log(table))
        return MatchResolver(
            match_rows_from_table(table),
            faction_a=self.config.faction_a,
            faction_b=self.config.faction_b,
        )

    def _load_matrix(self, path) -> PairMatrix:
        rows = read_rows(path)
        self._assert_valid(str(path), validate_pair_matrix(rows, name=str(path)))
        matrix = PairMatrix.from_rows(rows)
        if matrix is None:
            raise MalformedInputError(f"{path} has no head-to-head body rows")
        return matrix

    def load_head_to_head(self) -> Optional[HeadToHead]:
        """Load the score matrix and, when present, the dominance matrix."""
        if not self.config.h2h_score_path:
            return None
        score = self._load_matrix(self.config.h2h_score_path)
        dominance = None
        dominance_path = self.config.h2h_dominance_path
        if dominance_path and Path(dominance_path).exists():
            dominance = self._load_matrix(dominance_path)
        elif dominance_path:
            logger.info("Dominance matrix %s not found; publishing scores only", dominance_path)
        return HeadToHead(score, dominance)

    def build_head_to_head(self, h2h: Optional[HeadToHead] = None) -> Optional[str]:
        """Write ``h2h.json``; ``None`` when no score matrix is configured."""
        if h2h is None:
            h2h = self.load_head_to_head()
        if h2h is None:
            return None
        payload = {
            "meta": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "score_source": self.config.h2h_score_path,
                "dominance_source": self.config.h2h_dominance_path if h2h.dominance else None,
            },
            **h2h.to_dict(),
        }
        logger.info("Head-to-head: %d score pairs, %d dominance pairs", len(h2h.scores), len(h2h.dominance))
        return self._write_json("h2h.json", payload)

    def check_match_log(self, resolver: Optional[MatchResolver]) -> None:
        """Fail when the event log reaches past the next archivable period."""
        if resolver is None or resolver.max_period() is None:
            return
        reachable = self.store.next_period()
        last = resolver.max_period()
        if last > reachable:
            missing = list(range(reachable + 1, last + 1))
            raise MissingPeriodError(
                missing,
                f"Match log reaches period {last} but the archive can reach at most period {reachable}; "
                f"missing period(s): {', '.join(str(p) for p in missing)}",
            )

    def build_episodes(self, through: Optional[int] = None, resolver: Optional[MatchResolver] = None) -> List[Dict]:
        """Rebuild ``episodes.json`` from the archive and the event log."""
        if resolver is None:
            resolver = self.load_match_resolver()
        if through is None and resolver is not None:
            through = resolver.max_period()
        if through is None:
            latest = self.store.latest()
            through = latest.period if latest is not None else None
        if through is None:
            episodes: List[Dict] = []
        else:
            snapshots = self.store.read_range(0, through)
            episodes = [
                e.to_dict()
                for e in build_episodes(
                    snapshots,
                    resolver,
                    top_n=self.config.top_movers,
                    faction_top_n=self.config.top_faction_movers,
                )
            ]
        self._write_json("episodes.json", episodes)
        return episodes

    def build_analytics(self) -> Dict[str, str]:
        """Write power history, dashboard and faction standings."""
        snapshots = self.store.read_all()
        history = power_history(snapshots, start_period=self.config.analytics_start_period)
        dashboard = build_dashboard(
            snapshots,
            start_period=self.config.analytics_start_period,
            gain_base_period=self.config.gain_base_period,
            min_momentum_points=self.config.min_momentum_points,
            momentum_threshold=self.config.momentum_threshold,
        )
        latest = snapshots[-1] if snapshots else None
        prev = snapshots[-2] if len(snapshots) > 1 else None
        factions = faction_standings(latest, prev) if latest is not None else []

        return {
            "power_history": self._write_json("power_history.json", [s.to_dict() for s in history.values()]),
            "dashboard": self._write_json("dashboard.json", dashboard),
            "factions": self._write_json("factions.json", factions),
        }

    def run(self) -> Dict:
        """Archive, rebuild episodes and analytics, then write the manifest.

        Every configured input (event log, head-to-head matrices) is loaded
        and checked before the archive is touched, so a bad input leaves the
        archive unchanged.
        """
        resolver = self.load_match_resolver()
        self.check_match_log(resolver)
        h2h = self.load_head_to_head()

        manifest = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "config": asdict(self.config),
            "archive": {},
            "artifacts": {},
        }

        result = self.archive_roster()
        manifest["archive"] = {
            "appended": result.appended,
            "period": result.period,
            "path": result.path,
            "periods": self.store.periods(),
        }
        manifest["artifacts"]["rankings_json"] = str(self.output_dir / "rankings.json")

        episodes = self.build_episodes(resolver=resolver)
        manifest["artifacts"]["episodes_json"] = str(self.output_dir / "episodes.json")
        manifest["episode_count"] = len(episodes)

        for name, path in self.build_analytics().items():
            manifest["artifacts"][f"{name}_json"] = path

        h2h_path = self.build_head_to_head(h2h)
        if h2h_path is not None:
            manifest["artifacts"]["h2h_json"] = h2h_path

        manifest_path = self._write_json("manifest.json", manifest)
        manifest["manifest_path"] = manifest_path
        return manifest

    def _write_json(self, filename: str, payload) -> str:
        return DataLoader.save_json(payload, self.output_dir / filename)

    def _assert_valid(self, artifact_name: str, errors: List[str]) -> None:
        if not errors:
            return
        if self.config.strict_validation:
            raise MalformedInputError(f"{artifact_name} validation failed: {errors[:5]}")
        logger.warning("%s validation issues: %s", artifact_name, errors[:5])

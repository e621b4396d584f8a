"""Rebuild the snapshot archive from per-period roster tables, then verify it."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from survivor_stats.archive.store import MissingPeriodError
from survivor_stats.data.tabular import MalformedInputError
from survivor_stats.pipeline.season import SeasonConfig, SeasonPipeline


def main() -> int:
    parser = argparse.ArgumentParser(description="Backfill the snapshot archive from players_ep_NNN tables")
    parser.add_argument("source_dir", help="Directory holding players_ep_NNN.csv tables")
    parser.add_argument("--archive-dir", default=str(REPO_ROOT / "data" / "archive"))
    parser.add_argument("--output-dir", default=str(REPO_ROOT / "data" / "published"))
    parser.add_argument("--match-log", default=None, help="Optional duels.csv to rebuild episodes afterwards")
    parser.add_argument("--skip-analytics", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    pipeline = SeasonPipeline(
        SeasonConfig(
            archive_dir=args.archive_dir,
            output_dir=args.output_dir,
            roster_path=None,
            match_log_path=args.match_log,
        )
    )

    try:
        results = pipeline.backfill(args.source_dir)
        periods = pipeline.store.verify_contiguous()
        episodes = pipeline.build_episodes()
        if not args.skip_analytics:
            pipeline.build_analytics()
    except (MalformedInputError, MissingPeriodError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for result in results:
        status = "archived" if result.appended else "unchanged"
        print(f"period {result.period:03d}: {status}")
    print(f"Archive periods: 0..{periods[-1] if periods else -1}; episodes: {len(episodes)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

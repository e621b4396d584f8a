"""Main CLI interface for the survivor-stats season engine."""

import argparse
import logging
import sys

from .archive.store import MissingPeriodError
from .data.tabular import MalformedInputError
from .pipeline.season import SeasonConfig, SeasonPipeline


def build_config(args) -> SeasonConfig:
    """
    Map parsed CLI arguments onto a SeasonConfig.

    Args:
        args: Parsed argparse namespace

    Returns:
        SeasonConfig instance
    """
    return SeasonConfig(
        archive_dir=args.archive_dir,
        output_dir=args.output_dir,
        roster_path=getattr(args, "roster", None),
        match_log_path=getattr(args, "match_log", None),
        h2h_score_path=getattr(args, "h2h_score", None),
        h2h_dominance_path=getattr(args, "h2h_dominance", None),
        faction_a=args.faction_a,
        faction_b=args.faction_b,
        trend_epsilon=args.trend_epsilon,
        momentum_threshold=args.momentum_threshold,
        min_momentum_points=args.min_momentum_points,
        top_movers=args.top_movers,
        top_faction_movers=args.top_faction_movers,
        analytics_start_period=args.start_period,
        gain_base_period=args.gain_base_period,
        strict_validation=not args.allow_invalid_tables,
    )


def archive_roster(args):
    """Ingest the roster table and append a snapshot."""
    print(f"Reading roster from {args.roster}...")
    result = SeasonPipeline(build_config(args)).archive_roster()
    if result.appended:
        print(f"✓ Archived period {result.period}: {result.path}")
    else:
        print(f"✓ No change since period {result.period}; archive not advanced")
    return 0


def rebuild_episodes(args):
    """Rebuild episodes from the archive and match log."""
    episodes = SeasonPipeline(build_config(args)).build_episodes(through=args.through)
    print(f"✓ Built {len(episodes)} episodes in {args.output_dir}")
    return 0


def rebuild_analytics(args):
    """Write power history, dashboard and faction standings."""
    artifacts = SeasonPipeline(build_config(args)).build_analytics()
    print("✓ Analytics complete.")
    for name, path in artifacts.items():
        print(f"   - {name}: {path}")
    return 0


def rebuild_head_to_head(args):
    """Write h2h.json from the score and dominance matrices."""
    path = SeasonPipeline(build_config(args)).build_head_to_head()
    print(f"✓ Head-to-head written to {path}")
    return 0


def run_season(args):
    """Run archive, episodes and analytics in one pass."""
    manifest = SeasonPipeline(build_config(args)).run()
    archive = manifest["archive"]
    state = "appended" if archive["appended"] else "unchanged"
    print(f"Archive {state} at period {archive['period']}; {manifest['episode_count']} episodes")
    print(f"✓ Season run complete. Manifest: {manifest['manifest_path']}")
    return 0


def backfill_archive(args):
    """Rebuild the archive from per-period roster tables."""
    results = SeasonPipeline(build_config(args)).backfill(args.source_dir)
    appended = sum(1 for r in results if r.appended)
    print(f"✓ Backfill complete: {appended} of {len(results)} tables archived")
    return 0


def _add_common_arguments(parser):
    parser.add_argument("--archive-dir", default="data/archive", help="Snapshot archive directory")
    parser.add_argument("--output-dir", default="data/published", help="Published artifacts directory")
    parser.add_argument("--faction-a", default="A", help="Display name of the side-A faction")
    parser.add_argument("--faction-b", default="B", help="Display name of the side-B faction")
    parser.add_argument("--trend-epsilon", type=float, default=0.05, help="Power change needed for an up/down trend")
    parser.add_argument("--momentum-threshold", type=float, default=0.05, help="Slope needed for up/down momentum")
    parser.add_argument("--min-momentum-points", type=int, default=5, help="Minimum series length for momentum")
    parser.add_argument("--top-movers", type=int, default=10, help="Global risers/fallers per episode")
    parser.add_argument("--top-faction-movers", type=int, default=5, help="Risers/fallers per faction per episode")
    parser.add_argument("--start-period", type=int, default=0, help="First period used by analytics")
    parser.add_argument("--gain-base-period", type=int, default=1, help="Baseline period for season gain/loss")
    parser.add_argument(
        "--allow-invalid-tables",
        action="store_true",
        help="Log table validation problems instead of failing",
    )


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Survivor Stats - season snapshot archive, episodes and analytics"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    archive_parser = subparsers.add_parser("archive", help="Ingest the roster and archive a snapshot")
    archive_parser.add_argument("--roster", "-r", default="data/players.csv", help="Roster table (csv/tsv)")
    _add_common_arguments(archive_parser)

    episodes_parser = subparsers.add_parser("episodes", help="Rebuild episodes.json")
    episodes_parser.add_argument("--match-log", "-m", default=None, help="Head-to-head event log (duels.csv)")
    episodes_parser.add_argument("--through", type=int, default=None, help="Last period to build (default: log max)")
    _add_common_arguments(episodes_parser)

    analytics_parser = subparsers.add_parser("analytics", help="Rebuild power history, dashboard and factions")
    _add_common_arguments(analytics_parser)

    h2h_parser = subparsers.add_parser("h2h", help="Rebuild h2h.json from head-to-head matrices")
    h2h_parser.add_argument("--score", dest="h2h_score", required=True, help="Score matrix (cells like 2-1)")
    h2h_parser.add_argument("--dominance", dest="h2h_dominance", default=None, help="Optional dominance matrix")
    _add_common_arguments(h2h_parser)

    run_parser = subparsers.add_parser("run", help="Archive, episodes and analytics in one pass")
    run_parser.add_argument("--roster", "-r", default="data/players.csv", help="Roster table (csv/tsv)")
    run_parser.add_argument("--match-log", "-m", default=None, help="Head-to-head event log (duels.csv)")
    run_parser.add_argument("--h2h-score", default=None, help="Optional head-to-head score matrix")
    run_parser.add_argument("--h2h-dominance", default=None, help="Optional head-to-head dominance matrix")
    _add_common_arguments(run_parser)

    backfill_parser = subparsers.add_parser("backfill", help="Rebuild the archive from players_ep_NNN tables")
    backfill_parser.add_argument("source_dir", help="Directory holding players_ep_NNN.csv tables")
    _add_common_arguments(backfill_parser)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    handlers = {
        "archive": archive_roster,
        "episodes": rebuild_episodes,
        "analytics": rebuild_analytics,
        "h2h": rebuild_head_to_head,
        "run": run_season,
        "backfill": backfill_archive,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except (MalformedInputError, MissingPeriodError) as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Tests for rebuilding episodes from an ordered snapshot sequence."""

import pytest

from survivor_stats.archive.store import MissingPeriodError
from survivor_stats.data.records import MatchRow
from survivor_stats.episodes.builder import build_episodes
from survivor_stats.episodes.matches import MatchResolver
from survivor_stats.models.participant import Participant
from survivor_stats.models.snapshot import Snapshot


def snap(period, power):
    participants = (Participant(id="p1", name="P1", faction="Red", power=power),)
    return Snapshot(period=period, participants=participants, built_at=f"2024-01-{period + 1:02d}")


def test_one_episode_per_period_after_zero():
    resolver = MatchResolver([MatchRow(period=2, match_id="m1", side_a_won=1.0, side_b_won=0.0)], "Red", "Blue")
    episodes = build_episodes([snap(0, 1.0), snap(1, 2.0), snap(2, 2.5)], resolver)

    assert [e.period for e in episodes] == [1, 2]
    assert episodes[0].match_result is None
    assert episodes[1].match_result.winner == "Red"
    assert episodes[1].date == "2024-01-03"


def test_empty_and_single_snapshot():
    assert build_episodes([]) == []
    assert build_episodes([snap(0, 1.0)]) == []


def test_gaps_report_every_missing_period():
    with pytest.raises(MissingPeriodError) as excinfo:
        build_episodes([snap(0, 1.0), snap(2, 2.0), snap(4, 3.0)])
    assert excinfo.value.missing == [1, 3]


def test_out_of_order_snapshots_rejected():
    with pytest.raises(ValueError):
        build_episodes([snap(1, 1.0), snap(0, 2.0)])

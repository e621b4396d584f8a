"""Tests for event-log match resolution."""

from survivor_stats.data.records import MatchRow, match_rows_from_table
from survivor_stats.data.tabular import parse_delimited
from survivor_stats.episodes.matches import DRAW, MatchResolver, resolve_matches


def rows(period, match_id, outcomes):
    """``outcomes`` is a string of ``a`` / ``b`` winners, one row each."""
    return [
        MatchRow(period=period, match_id=match_id, side_a_won=float(o == "a"), side_b_won=float(o == "b"))
        for o in outcomes
    ]


def test_greatest_combined_score_decides_period():
    log = rows(1, "m1", "aab") + rows(1, "m2", "abbb")
    result = MatchResolver(log).result_for(1)

    assert result.match_id == "m2"
    assert (result.score_a, result.score_b) == (1.0, 3.0)
    assert result.winner == "B"
    assert result.margin == 2.0


def test_ties_broken_by_input_order():
    log = rows(1, "first", "ab") + rows(1, "second", "bb")
    result = MatchResolver(log).result_for(1)
    assert result.match_id == "first"
    assert result.winner == DRAW
    assert result.margin == 0.0


def test_interleaved_rows_grouped_by_match():
    log = rows(2, "x", "a") + rows(2, "y", "b") + rows(2, "x", "a") + rows(2, "y", "b") + rows(2, "x", "a")
    result = MatchResolver(log).result_for(2)
    assert result.match_id == "x"
    assert result.score_a == 3.0


def test_absent_period_is_none_not_draw():
    resolver = MatchResolver(rows(1, "m1", "ab"))
    assert resolver.result_for(1).winner == DRAW
    assert resolver.result_for(2) is None


def test_empty_log():
    resolver = MatchResolver([])
    assert resolver.result_for(1) is None
    assert resolver.max_period() is None
    assert resolver.to_dict() == {}


def test_configured_faction_names():
    resolver = MatchResolver(rows(3, "m", "abb"), faction_a="Red", faction_b="Blue")
    result = resolver.result_for(3)
    assert result.winner == "Blue"
    assert result.to_dict()["scores"] == {"Red": 1.0, "Blue": 2.0}


def test_max_period_and_periods():
    resolver = MatchResolver(rows(4, "m", "a") + rows(1, "m", "b") + rows(2, "m", "a"))
    assert resolver.max_period() == 4
    assert resolver.periods() == [1, 2, 4]


def test_resolve_from_table():
    table = parse_delimited(
        "EpisodeID,TeamMatchID,GameType,RedWon,BlueWon\n"
        "1,m1,duel,1,0\n"
        "1,m1,duel,1,0\n"
        "1,m1,duel,0,1\n"
        "1,m2,practice,0,1\n"
        "2,,duel,0,1\n"
    )
    results = resolve_matches(match_rows_from_table(table), faction_a="Red", faction_b="Blue")
    assert results[1].match_id == "m1"
    assert results[1].winner == "Red"
    assert results[1].game_type == "duel"
    assert results[2].match_id == "unknown"
    assert results[2].winner == "Blue"

"""Tests for snapshot diffing and movers ranking."""

import json

from survivor_stats.episodes.diff import compute_movers, diff
from survivor_stats.models.participant import Participant
from survivor_stats.models.snapshot import Snapshot


def snap(period, rows):
    participants = tuple(
        Participant(id=pid, name=pid.upper(), faction=faction, power=power) for pid, power, faction in rows
    )
    return Snapshot(period=period, participants=participants)


def test_two_participant_scenario():
    prev = snap(0, [("p1", 10.0, "Red"), ("p2", 8.0, "Blue")])
    curr = snap(1, [("p1", 12.0, "Red"), ("p2", 7.0, "Blue")])

    summary = diff(prev, curr)

    assert summary.compared_players == 2
    assert summary.top_riser.id == "p1"
    assert summary.top_riser.delta == 2.0
    assert summary.top_faller.id == "p2"
    assert summary.top_faller.delta == -1.0
    assert summary.biggest_rise("Red").id == "p1"
    assert summary.biggest_fall("Blue").id == "p2"


def test_diff_is_deterministic():
    prev = snap(0, [("a", 3.0, "Red"), ("b", 3.0, "Red"), ("c", 5.0, "Blue"), ("d", 1.0, "Blue")])
    curr = snap(1, [("c", 6.0, "Blue"), ("a", 4.0, "Red"), ("b", 4.0, "Red"), ("e", 2.0, "Blue")])

    first = json.dumps({"s": diff(prev, curr).to_dict(), "m": diff(prev, curr).movers_dict()}, sort_keys=True)
    second = json.dumps({"s": diff(prev, curr).to_dict(), "m": diff(prev, curr).movers_dict()}, sort_keys=True)
    assert first == second


def test_first_appearance_has_no_delta():
    prev = snap(0, [("p1", 10.0, "Red")])
    curr = snap(1, [("p1", 11.0, "Red"), ("p3", 50.0, "Red")])

    movers = {m.id: m for m in compute_movers(prev, curr)}
    assert movers["p3"].delta is None
    assert movers["p3"].prev_power is None

    summary = diff(prev, curr)
    assert summary.compared_players == 2
    assert summary.with_delta == 1
    assert summary.new_entries == 1
    assert [m.id for m in summary.risers] == ["p1"]


def test_delta_rounded_to_two_decimals():
    summary = diff(snap(0, [("p1", 10.0, "Red")]), snap(1, [("p1", 10.3333, "Red")]))
    assert summary.top_riser.delta == 0.33


def test_ties_keep_current_order():
    prev = snap(0, [("a", 1.0, "Red"), ("b", 1.0, "Red")])
    curr = snap(1, [("b", 2.0, "Red"), ("a", 2.0, "Red")])
    summary = diff(prev, curr)
    assert [m.id for m in summary.risers] == ["b", "a"]


def test_top_n_limits():
    prev = snap(0, [(f"r{i}", 0.0, "Red") for i in range(8)] + [(f"b{i}", 0.0, "Blue") for i in range(8)])
    curr = snap(1, [(f"r{i}", float(i), "Red") for i in range(8)] + [(f"b{i}", -float(i), "Blue") for i in range(8)])

    summary = diff(prev, curr)

    assert len(summary.risers) == 10
    assert len(summary.fallers) == 10
    assert summary.risers[0].id == "r7"
    assert summary.fallers[0].id == "b7"
    assert len(summary.faction_risers["Red"]) == 5
    assert [m.id for m in summary.faction_risers["Red"]][:2] == ["r7", "r6"]
    assert summary.biggest_fall("Blue").id == "b7"


def test_blank_faction_grouped_as_unknown():
    prev = snap(0, [("p1", 1.0, "")])
    curr = snap(1, [("p1", 3.0, "")])
    summary = diff(prev, curr)
    assert summary.biggest_rise("Unknown").id == "p1"
    assert summary.top_riser.faction == "Unknown"


def test_missing_faction_lists_give_none():
    summary = diff(snap(0, [("p1", 1.0, "Red")]), snap(1, [("p1", 3.0, "Red")]))
    assert summary.biggest_rise("Blue") is None
    assert summary.biggest_fall("Blue") is None


def test_no_previous_snapshot():
    summary = diff(None, snap(0, [("p1", 1.0, "Red")]))
    assert summary.compared_players == 1
    assert summary.top_riser is None
    assert summary.top_faller is None

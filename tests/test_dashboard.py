"""Tests for the season dashboard and faction standings."""

import pytest

from survivor_stats.analytics.dashboard import build_dashboard
from survivor_stats.analytics.factions import faction_standings, majority_trend
from survivor_stats.models.participant import Participant
from survivor_stats.models.snapshot import Snapshot
from survivor_stats.snapshots.builder import classify_trend

# a rises, b is flat, c falls, d is eliminated at period 2 and frozen at 7.
SEASON = {
    "a": ("X", [10.0, 11.0, 12.0, 13.0, 14.0, 15.0], None),
    "b": ("Y", [8.0, 8.0, 8.0, 8.0, 8.0, 8.0], None),
    "c": ("X", [5.0, 4.0, 3.0, 2.0, 1.0, 0.0], None),
    "d": ("Y", [6.0, 7.0, 7.0, 7.0, 7.0, 7.0], 2),
}
STATS = {"a": {"wins": 6.0, "duels": 10.0}, "c": {"wins": 2.0, "duels": 10.0}}


def build_season():
    snapshots = []
    for period in range(6):
        participants = []
        for pid, (faction, powers, elim) in SEASON.items():
            prev = powers[period - 1] if period else None
            participants.append(
                Participant(
                    id=pid,
                    name=pid.upper(),
                    faction=faction,
                    power=powers[period],
                    elimination_period=elim,
                    trend=classify_trend(powers[period], prev),
                    stats=STATS.get(pid, {}),
                )
            )
        participants.sort(key=lambda p: -p.power)
        snapshots.append(Snapshot(period=period, participants=tuple(participants)))
    return snapshots


@pytest.fixture
def season():
    return build_season()


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class TestDashboard:
    def test_empty(self):
        assert build_dashboard([]) == {}

    def test_counts_and_leader(self, season):
        dash = build_dashboard(season)
        assert dash["period"] == 5
        assert dash["participants_total"] == 4
        assert dash["participants_remaining"] == 3
        assert dash["leader"]["id"] == "a"

    def test_danger_zone_excludes_eliminated(self, season):
        dash = build_dashboard(season)
        assert [r["id"] for r in dash["danger_zone"]] == ["c", "b", "a"]
        assert dash["danger_zone"][0]["delta_last"] == -1.0

    def test_gain_and_loss_since_base(self, season):
        dash = build_dashboard(season)
        assert dash["biggest_gain"]["id"] == "a"
        assert dash["biggest_gain"]["delta"] == 4.0
        assert dash["biggest_loss"]["id"] == "c"
        assert dash["biggest_loss"]["delta"] == -4.0

    def test_hottest_and_coldest(self, season):
        dash = build_dashboard(season)
        assert [r["id"] for r in dash["hottest"]] == ["a", "b", "c"]
        assert [r["id"] for r in dash["coldest"]] == ["c", "b", "a"]
        assert dash["hottest"][0]["delta"] == 3.0

    def test_momentum_active_only(self, season):
        dash = build_dashboard(season)
        rows = {r["id"]: r for r in dash["momentum"]}
        assert set(rows) == {"a", "b", "c"}
        assert rows["a"]["slope"] == pytest.approx(1.0)
        assert rows["a"]["trend"] == "up"
        assert rows["b"]["trend"] == "flat"
        assert rows["c"]["trend"] == "down"
        assert [r["id"] for r in dash["momentum"]] == ["a", "b", "c"]

    def test_momentum_needs_five_points(self, season):
        dash = build_dashboard(season[:4])
        assert dash["momentum"] == []

    def test_reliability(self, season):
        dash = build_dashboard(season)
        assert dash["reliability_min_points"] == 5
        assert dash["most_reliable"]["id"] == "b"
        assert dash["most_reliable"]["stdev"] == 0.0
        assert dash["most_unreliable"]["id"] in {"a", "c"}

    def test_reliability_threshold_ignores_baseline_period(self, season):
        dash = build_dashboard(season[:4])
        assert dash["reliability_min_points"] == 3
        assert dash["most_reliable"]["id"] == "b"

    def test_chaos(self, season):
        chaos = build_dashboard(season)["chaos"]
        assert chaos["latest"] == pytest.approx(0.5)
        assert chaos["season_max"] == pytest.approx(0.75)
        assert chaos["season_min"] == pytest.approx(0.5)
        assert chaos["label"] == "LOW"
        assert chaos["rank"] == 5
        assert chaos["last3_avg"] == pytest.approx(0.5)
        assert [p["period"] for p in chaos["series"]] == [1, 2, 3, 4, 5]


# ---------------------------------------------------------------------------
# Factions
# ---------------------------------------------------------------------------


class TestFactionStandings:
    def test_sorted_by_average_power(self, season):
        rows = faction_standings(season[-1], season[-2])
        assert [r["faction"] for r in rows] == ["Y", "X"]

    def test_active_members_only(self, season):
        y, x = faction_standings(season[-1], season[-2])
        assert y["active_members"] == 1
        assert y["power_sum"] == 8.0
        assert x["active_members"] == 2
        assert x["power_avg"] == 7.5

    def test_mean_rank(self, season):
        y, x = faction_standings(season[-1], season[-2])
        assert x["mean_rank"] == 2.0
        assert y["mean_rank"] == 2.0

    def test_mvp_riser_faller(self, season):
        _, x = faction_standings(season[-1], season[-2])
        assert x["mvp"]["id"] == "a"
        assert x["riser"]["id"] == "a"
        assert x["riser"]["delta"] == 1.0
        assert x["faller"]["id"] == "c"
        assert x["faller"]["delta"] == -1.0

    def test_without_previous_snapshot(self, season):
        _, x = faction_standings(season[-1])
        assert x["riser"] is None
        assert x["faller"] is None

    def test_weighted_win_pct(self, season):
        y, x = faction_standings(season[-1], season[-2])
        assert x["win_pct"] == pytest.approx(0.4)
        assert y["win_pct"] is None

    def test_majority_trend(self, season):
        y, x = faction_standings(season[-1], season[-2])
        assert x["trend"] == "up"
        assert y["trend"] == "flat"


def test_majority_trend_rules():
    def people(*trends):
        return [Participant(id=str(i), name="n", faction="X", trend=t) for i, t in enumerate(trends)]

    assert majority_trend(people("up", "down")) == "up"
    assert majority_trend(people("down", "down", "up")) == "down"
    assert majority_trend(people("down", "flat")) == "down"
    assert majority_trend(people("flat", "flat", "up")) == "flat"
    assert majority_trend([]) == "flat"

"""Tests for power series, momentum, reliability and chaos statistics."""

import numpy as np
import pytest

from survivor_stats.analytics.timeseries import (
    chaos_rank,
    chaos_series,
    classify_chaos,
    classify_momentum,
    mean_abs_delta,
    momentum,
    power_history,
    reliability,
    required_reliability_points,
)
from survivor_stats.models.participant import Participant
from survivor_stats.models.snapshot import Snapshot


def snap(period, powers, elims=None):
    elims = elims or {}
    return Snapshot(
        period=period,
        participants=tuple(
            Participant(id=pid, name=pid.upper(), faction="Red", power=power, elimination_period=elims.get(pid))
            for pid, power in powers.items()
        ),
    )


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------


class TestMomentum:
    @pytest.mark.parametrize("values", [[], [1.0], [1.0, 5.0, 9.0, 13.0], [100.0, -100.0, 50.0, 3.0]])
    def test_minimum_points_guard(self, values):
        assert momentum(values) is None

    def test_linear_slope(self):
        assert momentum([1.0, 2.0, 3.0, 4.0, 5.0]) == pytest.approx(1.0)
        assert momentum([10.0, 8.0, 6.0, 4.0, 2.0, 0.0]) == pytest.approx(-2.0)

    def test_flat_series(self):
        assert momentum([3.0] * 6) == pytest.approx(0.0)

    def test_matches_numpy_polyfit(self):
        values = [4.0, 4.5, 4.2, 5.1, 5.0, 5.6, 5.4]
        expected = np.polyfit(np.arange(1, len(values) + 1), values, 1)[0]
        assert momentum(values) == pytest.approx(expected)

    def test_custom_minimum(self):
        assert momentum([1.0, 2.0, 3.0], min_points=3) == pytest.approx(1.0)

    def test_classify(self):
        assert classify_momentum(0.06) == "up"
        assert classify_momentum(-0.06) == "down"
        assert classify_momentum(0.05) == "flat"
        assert classify_momentum(-0.05) == "flat"
        assert classify_momentum(None) is None


# ---------------------------------------------------------------------------
# Reliability
# ---------------------------------------------------------------------------


class TestReliability:
    def test_sample_standard_deviation(self):
        values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        assert reliability(values) == pytest.approx(np.sqrt(32.0 / 7.0))

    def test_too_few_points(self):
        assert reliability([1.0]) is None
        assert reliability([1.0, 2.0, 3.0], min_points=5) is None

    def test_required_points(self):
        assert required_reliability_points(1) == 2
        assert required_reliability_points(3) == 3
        assert required_reliability_points(12) == 5


# ---------------------------------------------------------------------------
# Power history
# ---------------------------------------------------------------------------


def test_power_history_excludes_eliminated_periods():
    snaps = [
        snap(0, {"a": 1.0, "b": 5.0}, {"a": 2}),
        snap(1, {"a": 2.0, "b": 6.0}, {"a": 2}),
        snap(2, {"a": 2.0, "b": 7.0}, {"a": 2}),
        snap(3, {"a": 2.0, "b": 8.0}, {"a": 2}),
    ]
    history = power_history(snaps)
    assert history["a"].points == [(0, 1.0), (1, 2.0)]
    assert history["b"].values == [5.0, 6.0, 7.0, 8.0]


def test_power_history_start_period():
    snaps = [snap(0, {"a": 1.0}), snap(1, {"a": 2.0}), snap(2, {"a": 3.0})]
    assert power_history(snaps, start_period=1)["a"].values == [2.0, 3.0]


def test_power_series_to_dict():
    series = power_history([snap(0, {"a": 1.0})])["a"]
    assert series.to_dict() == {"id": "a", "name": "A", "faction": "Red", "series": [{"period": 0, "power": 1.0}]}


# ---------------------------------------------------------------------------
# Chaos
# ---------------------------------------------------------------------------


class TestChaos:
    def test_mean_abs_delta_over_common_participants(self):
        assert mean_abs_delta(snap(0, {"a": 10.0, "b": 5.0}), snap(1, {"a": 12.0, "b": 4.0})) == pytest.approx(1.5)
        assert mean_abs_delta(snap(0, {"a": 1.0}), snap(1, {"z": 1.0})) is None

    def test_series_skips_pairs_without_overlap(self):
        snaps = [
            snap(0, {"a": 10.0, "b": 5.0}),
            snap(1, {"a": 12.0, "b": 4.0}),
            snap(2, {"c": 1.0}),
            snap(3, {"c": 3.0}),
        ]
        assert chaos_series(snaps) == [(1, pytest.approx(1.5)), (3, pytest.approx(2.0))]

    def test_percentile_classification(self):
        season = [float(v) for v in range(1, 11)]
        assert classify_chaos(3.0, season) == "LOW"
        assert classify_chaos(5.0, season) == "MED"
        assert classify_chaos(7.0, season) == "HIGH"
        assert classify_chaos(None, season) is None
        assert classify_chaos(1.0, []) is None

    def test_constant_season_is_low(self):
        assert classify_chaos(0.5, [0.5, 0.5, 0.5]) == "LOW"

    def test_rank(self):
        series = [(1, 1.5), (2, 0.0), (3, 3.0)]
        assert chaos_rank(series, 3) == 1
        assert chaos_rank(series, 1) == 2
        assert chaos_rank(series, 2) == 3
        assert chaos_rank(series, 9) is None

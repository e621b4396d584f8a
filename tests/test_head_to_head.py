"""Tests for head-to-head matrix parsing and pairwise records."""

import pytest

from survivor_stats.analytics.head_to_head import HeadToHead, PairMatrix, PairScore, parse_score_cell
from survivor_stats.data.tabular import split_rows
from survivor_stats.data.validators import validate_pair_matrix

SCORE_CSV = (
    ",PlayerID,13,14,15\n"
    "PlayerID,PlayerName,Alice,Bob,Cara\n"
    "13,Alice,,2-1,3\u20130\n"
    "14,Bob,1-2,,n/a\n"
    "15,,0-0,,\n"
)
DOMINANCE_CSV = (
    ",PlayerID,13,14\n"
    "PlayerID,PlayerName,Alice,Bob\n"
    '13,Alice,,"0,61234"\n'
    "14,Bob,0.4,\n"
)


def matrix(text):
    rows, _ = split_rows(text)
    return PairMatrix.from_rows(rows)


# ---------------------------------------------------------------------------
# Score cells
# ---------------------------------------------------------------------------


class TestParseScoreCell:
    def test_hyphen(self):
        score = parse_score_cell("2-1")
        assert score == PairScore(wins=2, losses=1)
        assert score.total == 3
        assert score.win_pct == pytest.approx(0.6667)
        assert score.loss_pct == pytest.approx(0.3333)
        assert score.raw == "2-1"

    def test_en_dash_and_spaces(self):
        assert parse_score_cell(" 3 \u2013 0 ") == PairScore(wins=3, losses=0)

    def test_no_games_has_no_percentages(self):
        score = parse_score_cell("0-0")
        assert score.total == 0
        assert score.win_pct is None
        assert score.to_dict()["loss_pct"] is None

    @pytest.mark.parametrize("raw", ["", None, "n/a", "2", "2-1-0", "a-b"])
    def test_unparseable(self, raw):
        assert parse_score_cell(raw) is None


# ---------------------------------------------------------------------------
# Matrices
# ---------------------------------------------------------------------------


class TestPairMatrix:
    def test_layout(self):
        m = matrix(SCORE_CSV)
        assert m.col_ids == ["13", "14", "15"]
        assert m.row_ids == ["13", "14", "15"]
        assert m.names() == {"13": "Alice", "14": "Bob", "15": "Cara"}

    def test_too_few_rows(self):
        rows, _ = split_rows(",PlayerID,13\nPlayerID,PlayerName,Alice\n")
        assert PairMatrix.from_rows(rows) is None
        assert validate_pair_matrix(rows)

    def test_validator_flags_duplicate_rows(self):
        rows, _ = split_rows(SCORE_CSV + "13,Alice again,,,\n")
        errors = validate_pair_matrix(rows)
        assert any("duplicate id '13'" in e for e in errors)

    def test_valid_matrix_has_no_errors(self):
        rows, _ = split_rows(SCORE_CSV)
        assert validate_pair_matrix(rows) == []


class TestHeadToHead:
    def test_scores_keyed_by_pair(self):
        h2h = HeadToHead(matrix(SCORE_CSV))
        assert h2h.scores[("13", "14")] == PairScore(2, 1)
        assert h2h.scores[("13", "15")] == PairScore(3, 0)
        assert ("14", "15") not in h2h.scores
        assert h2h.scores[("15", "13")].win_pct is None

    def test_record_falls_back_to_mirror(self):
        h2h = HeadToHead(matrix(SCORE_CSV))
        assert h2h.record("13", "14") == PairScore(2, 1)
        assert h2h.record("15", "13") == PairScore(0, 0)
        assert h2h.record("14", "15") is None
        assert HeadToHead(matrix(",PlayerID,1,2\nPlayerID,Name,A,B\n1,A,,4-1\n")).record("2", "1") == PairScore(1, 4)

    def test_dominance_values(self):
        h2h = HeadToHead(matrix(SCORE_CSV), matrix(DOMINANCE_CSV))
        assert h2h.dominance == {("13", "14"): 0.6123, ("14", "13"): 0.4}

    def test_to_dict(self):
        payload = HeadToHead(matrix(SCORE_CSV)).to_dict()
        assert payload["players"]["14"] == {"id": "14", "name": "Bob"}
        assert payload["score"]["13|14"]["wins"] == 2
        assert payload["score"]["13|14"]["raw"] == "2-1"
        assert payload["dominance"] == {}

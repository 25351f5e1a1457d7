"""Tests for leaderboard derivation."""

from trivia_judge.scoring import build_leaderboard, ledger_total


class TestLedgerTotal:
    """Tests for re-summing ledger points."""

    def test_sums_points(self):
        assert ledger_total([{"points": 1.25}, {"points": 0.5}]) == 1.75

    def test_ignores_unparseable_points(self):
        entries = [{"points": 1.0}, {"points": "bad"}, {"points": None}, {}]
        assert ledger_total(entries) == 1.0

    def test_ignores_non_finite_points(self):
        assert ledger_total([{"points": float("nan")}, {"points": 2.0}]) == 2.0

    def test_rounds_to_precision(self):
        assert ledger_total([{"points": 1 / 3}], precision=3) == 0.333


class TestBuildLeaderboard:
    """Tests for ranking teams."""

    def test_sorted_by_total_desc(self):
        rows = build_leaderboard(
            [
                ("t1", "A", [{"points": 1.0}]),
                ("t2", "B", [{"points": 2.0}, {"points": 1.5}]),
            ]
        )
        assert [r.team_name for r in rows] == ["B", "A"]
        assert [r.rank for r in rows] == [1, 2]
        assert rows[0].total_points == 3.5
        assert rows[0].answers == 2

    def test_ties_broken_by_team_name(self):
        rows = build_leaderboard(
            [
                ("x", "Zeta", [{"points": 1.0}]),
                ("y", "Alpha", [{"points": 1.0}]),
            ]
        )
        assert [r.team_name for r in rows] == ["Alpha", "Zeta"]

    def test_session_teams_without_results_listed_with_zero(self):
        """Test every team of the session appears, scored or not."""
        rows = build_leaderboard([("t1", "A", [{"points": 2.0}])], team_names=["A", "B"])
        assert [(r.team_name, r.total_points) for r in rows] == [("A", 2.0), ("B", 0.0)]
        assert rows[1].team_id is None

    def test_total_is_sum_of_own_ledger(self):
        ledger = [{"points": 0.1}, {"points": 0.2}, {"points": 0.3}]
        rows = build_leaderboard([("t1", "A", ledger)])
        assert rows[0].total_points == ledger_total(ledger)

    def test_empty(self):
        assert build_leaderboard([]) == []

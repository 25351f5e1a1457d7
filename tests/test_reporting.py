"""Tests for leaderboard and results reports."""

import csv
import json
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from trivia_judge.models.views import SessionResults, TeamResult
from trivia_judge.scoring import LeaderboardRow
from trivia_judge.services.reporting import (
    export_leaderboard,
    render_leaderboard,
    render_results,
)

ROWS = [
    LeaderboardRow(rank=1, team_name="Owls", total_points=3.5, team_id="t1", answers=2),
    LeaderboardRow(rank=2, team_name="Bears", total_points=0.0),
]


class TestRenderLeaderboard:
    """Tests for markdown leaderboards."""

    def test_markdown_table(self):
        report = render_leaderboard(ROWS, "Leaderboard: Friday", description="Final scores")
        lines = report.splitlines()
        assert lines[0] == "# Leaderboard: Friday"
        assert "Final scores" in lines
        assert "| Rank " in report
        assert "| Owls " in report
        assert "| 3.50 " in report

    def test_columns_left_aligned(self):
        """Test formatted points are kept as text, not re-parsed as numbers."""
        report = render_leaderboard(ROWS, "T")
        assert "|   Rank" not in report
        assert "| 1 " in report
        assert "| 0.00 " in report

    def test_precision(self):
        assert "| 3.5000 " in render_leaderboard(ROWS, "T", precision=4)


class TestRenderResults:
    """Tests for the results report."""

    def test_no_sessions(self):
        assert "No ended sessions." in render_results([])

    def test_sessions_listed(self):
        results = [
            SessionResults(
                session_id="s1",
                name="Session s1",
                created_at=datetime(2026, 1, 2, 19, 30, tzinfo=UTC),
                results=[TeamResult(team_id="t1", team_name="Owls", total_points=3.5)],
            )
        ]
        report = render_results(results)
        assert "## Session s1" in report
        assert "Created: 2026-01-02 19:30" in report
        assert "| Owls " in report
        assert "| 3.50 " in report

    def test_results_precision(self):
        results = [
            SessionResults(
                session_id="s1",
                name="Session s1",
                created_at=datetime(2026, 1, 2, 19, 30, tzinfo=UTC),
                results=[TeamResult(team_id="t1", team_name="Owls", total_points=3.5)],
            )
        ]
        assert "| 3.500 " in render_results(results, precision=3)


class TestExportLeaderboard:
    """Tests for file exports."""

    async def test_writes_md_csv_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            out = Path(tmpdir) / "exports"
            paths = await export_leaderboard(ROWS, out, "Friday")
            assert [p.name for p in paths] == [
                "leaderboard.md",
                "leaderboard.csv",
                "leaderboard.json",
            ]

            assert (out / "leaderboard.md").read_text().startswith("# Leaderboard: Friday")

            with (out / "leaderboard.csv").open(newline="") as f:
                rows = list(csv.DictReader(f))
            assert rows[0]["team_name"] == "Owls"
            assert rows[0]["total_points"] == "3.50"
            assert rows[1]["team_id"] == ""

            data = json.loads((out / "leaderboard.json").read_text())
            assert data[0]["team_name"] == "Owls"
            assert data[1]["total_points"] == 0.0

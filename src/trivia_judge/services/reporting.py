"""Report generation for leaderboards and session results."""

from __future__ import annotations

import asyncio
import csv
import json
from pathlib import Path

import structlog
from tabulate import tabulate

from trivia_judge.models.views import SessionResults
from trivia_judge.scoring import LeaderboardRow

logger = structlog.get_logger()

LEADERBOARD_HEADERS = ("Rank", "Team", "Points", "Answers")
RESULTS_HEADERS = ("Team", "Points", "Answers")


def render_leaderboard(
    leaderboard: list[LeaderboardRow],
    title: str,
    description: str | None = None,
    precision: int = 2,
) -> str:
    """Render a leaderboard as a markdown report.

    Args:
        leaderboard: Ranked rows.
        title: Report title (markdown heading).
        description: Optional description line below title.
        precision: Decimal places for points.

    Returns:
        Markdown report content.
    """
    rows = [
        (r.rank, r.team_name, f"{r.total_points:.{precision}f}", r.answers) for r in leaderboard
    ]
    lines = [f"# {title}", ""]
    if description:
        lines.extend([description, ""])
    lines.append(
        tabulate(rows, headers=LEADERBOARD_HEADERS, tablefmt="github", disable_numparse=True)
    )
    return "\n".join(lines)


def render_results(results: list[SessionResults], precision: int = 2) -> str:
    """Render ended sessions and their team totals as markdown."""
    lines = ["# Session Results", ""]
    if not results:
        lines.append("No ended sessions.")
        return "\n".join(lines)

    for session_results in results:
        lines.append(f"## {session_results.name}")
        lines.append("")
        lines.append(f"Created: {session_results.created_at:%Y-%m-%d %H:%M}")
        lines.append("")
        rows = [
            (t.team_name, f"{t.total_points:.{precision}f}", len(t.details))
            for t in session_results.results
        ]
        table = tabulate(
            rows, headers=RESULTS_HEADERS, tablefmt="github", disable_numparse=True
        )
        lines.append(table)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


async def export_leaderboard(
    leaderboard: list[LeaderboardRow],
    output_dir: str | Path,
    label: str,
    precision: int = 2,
) -> list[Path]:
    """Write a leaderboard as markdown, CSV and JSON files.

    Args:
        leaderboard: Ranked rows.
        output_dir: Directory to write into (created if missing).
        label: Title used in the markdown heading.
        precision: Decimal places for points.

    Returns:
        Paths of the written files.
    """
    directory = Path(output_dir)

    def _save() -> list[Path]:
        directory.mkdir(parents=True, exist_ok=True)

        md_path = directory / "leaderboard.md"
        with md_path.open("w", encoding="utf-8") as f:
            f.write(render_leaderboard(leaderboard, f"Leaderboard: {label}", precision=precision))
            f.write("\n")

        csv_path = directory / "leaderboard.csv"
        with csv_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["rank", "team_name", "team_id", "total_points", "answers"])
            for r in leaderboard:
                writer.writerow(
                    [
                        r.rank,
                        r.team_name,
                        r.team_id or "",
                        f"{r.total_points:.{precision}f}",
                        r.answers,
                    ]
                )

        json_path = directory / "leaderboard.json"
        with json_path.open("w", encoding="utf-8") as f:
            json.dump([r.model_dump() for r in leaderboard], f, indent=2, default=str)

        return [md_path, csv_path, json_path]

    paths = await asyncio.to_thread(_save)
    logger.info("leaderboard_exported", output_dir=str(directory), files=len(paths))
    return paths

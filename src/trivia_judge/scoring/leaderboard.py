"""Leaderboard derivation from stored session results."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel


class LeaderboardRow(BaseModel):
    """One ranked team.

    Attributes:
        rank: 1-based position.
        team_name: Team name.
        total_points: Re-summed ledger points, rounded.
        team_id: Team record id, None for teams without a result yet.
        answers: Number of ledger entries behind the total.
    """

    rank: int
    team_name: str
    total_points: float
    team_id: str | None = None
    answers: int = 0


def _points(entry: Any) -> float:
    value = entry.get("points") if isinstance(entry, Mapping) else getattr(entry, "points", None)
    try:
        points = float(value)
    except (TypeError, ValueError):
        return 0.0
    return points if math.isfinite(points) else 0.0


def ledger_total(entries: Iterable[Any], precision: int = 2) -> float:
    """Sum the ``points`` of ledger entries, ignoring unparseable values."""
    return round(sum(_points(e) for e in entries), precision)


def build_leaderboard(
    results: Sequence[tuple[str, str, Sequence[Any]]],
    team_names: Sequence[str] = (),
    precision: int = 2,
) -> list[LeaderboardRow]:
    """Rank teams by the sum of their own ledger points.

    Totals are re-summed from each ledger rather than read from the stored
    total so a stale total can never leak into the ranking. Teams listed in
    ``team_names`` without any result are appended with zero points.

    Args:
        results: (team_id, team_name, ledger) per stored result.
        team_names: All team names of the session.
        precision: Decimal places for totals.

    Returns:
        Rows sorted by total descending, then team name ascending.
    """
    rows: list[LeaderboardRow] = []
    seen: set[str] = set()
    for team_id, team_name, ledger in results:
        seen.add(team_name)
        rows.append(
            LeaderboardRow(
                rank=0,
                team_id=team_id,
                team_name=team_name,
                total_points=ledger_total(ledger, precision),
                answers=len(ledger),
            )
        )

    for name in team_names:
        if name not in seen:
            seen.add(name)
            rows.append(LeaderboardRow(rank=0, team_name=name, total_points=0.0))

    rows.sort(key=lambda r: (-r.total_points, r.team_name))
    for idx, row in enumerate(rows, 1):
        row.rank = idx
    return rows

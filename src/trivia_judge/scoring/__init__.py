"""Scoring module: weighted-choice points and leaderboard derivation."""

from __future__ import annotations

from trivia_judge.scoring.leaderboard import LeaderboardRow, build_leaderboard, ledger_total
from trivia_judge.scoring.weighted import (
    ScoreBreakdown,
    answer_text,
    ensure_scorable,
    score_answer,
    score_breakdown,
    score_question,
)

__all__ = [
    "LeaderboardRow",
    "ScoreBreakdown",
    "answer_text",
    "build_leaderboard",
    "ensure_scorable",
    "ledger_total",
    "score_answer",
    "score_breakdown",
    "score_question",
]

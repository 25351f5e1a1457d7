"""Trivia Judge.

Scoring and state-transition engine for live trivia judging: hosts rotate
through teams, judges submit weighted answers, results and leaderboards are
derived from stored answer sheets.
"""

from trivia_judge.engine import JudgingEngine

__version__ = "0.1.0"
__all__ = [
    "JudgingEngine",
    "__version__",
]

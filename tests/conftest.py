"""Shared fixtures: an engine over a throwaway SQLite database."""

import tempfile
from pathlib import Path

import pytest

from trivia_judge import JudgingEngine
from trivia_judge.core.config import JudgingConfig

JUDGE_PIN = "4321"

YES_NO = {
    "text": "Did the team name the capital of Australia?",
    "section": "Geography",
    "weight": 2,
    "choices": [{"text": "Yes", "weight": 1, "correct": True}, {"text": "No", "weight": 0}],
}

GRADED = {
    "text": "How well did the team explain photosynthesis?",
    "section": "Science",
    "weight": 3,
    "choices": [
        {"text": "Complete", "weight": 4},
        {"text": "Partial", "weight": 2},
        {"text": "Wrong", "weight": 0},
    ],
}


@pytest.fixture
def config():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield JudgingConfig(
            data_dir=tmpdir,
            database_url=f"sqlite:///{Path(tmpdir) / 'judging.db'}",
            judge_pin=JUDGE_PIN,
        )


@pytest.fixture
async def engine(config):
    judging_engine = JudgingEngine(config)
    yield judging_engine
    await judging_engine.close()


@pytest.fixture
async def questions(engine):
    """Yes/No question (weight 2) and a graded question (weight 3)."""
    _, saved = await engine.save_questions("Round 1", [YES_NO, GRADED])
    return saved

"""Weighted-choice scoring for submitted answers."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from trivia_judge.core.errors import ComputationError

if TYPE_CHECKING:
    from trivia_judge.models import Question


@dataclass(frozen=True)
class ScoreBreakdown:
    """Points for one answer plus the weights they were derived from.

    Attributes:
        points: Awarded points (never NaN or infinite).
        option_weight: Weight of the matched choice, 0.0 when unmatched.
        max_option_weight: Highest choice weight of the question.
        matched: Whether the answer text matched a choice.
    """

    points: float
    option_weight: float
    max_option_weight: float
    matched: bool


def answer_text(answer: Any) -> str | None:
    """Extract the submitted text from a raw value or an object carrying ``text``."""
    if isinstance(answer, Mapping):
        value = answer.get("text")
    elif isinstance(answer, str) or answer is None:
        value = answer
    else:
        value = getattr(answer, "text", None)
    return value if isinstance(value, str) else None


def _choice_field(choice: Any, name: str) -> Any:
    if isinstance(choice, Mapping):
        return choice.get(name)
    return getattr(choice, name, None)


def _choice_weight(choice: Any) -> float:
    weight = _choice_field(choice, "weight")
    if weight is None:
        return 0.0
    try:
        value = float(weight)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def score_breakdown(
    question_weight: float | None,
    choices: Sequence[Any] | None,
    answer: Any,
    default_weight: float = 1.0,
) -> ScoreBreakdown:
    """Score an answer against a question's weighted choices.

    The matched choice earns ``(choice_weight / max_weight) * question_weight``,
    so the highest-weighted choice always yields the full question value
    whatever scale the author picked. Matching is exact and case-sensitive.

    Degenerate inputs score 0.0: no choices, no match, or a maximum choice
    weight that is not positive.

    Args:
        question_weight: Point multiplier of the question. None uses default_weight.
        choices: Choices as ``Choice`` models or mappings with text/weight.
        answer: Choice text, or an object/mapping carrying ``text``.
        default_weight: Multiplier used when question_weight is None.

    Returns:
        ScoreBreakdown with points and the weights involved.
    """
    if not choices:
        return ScoreBreakdown(0.0, 0.0, 0.0, False)

    max_weight = max(_choice_weight(c) for c in choices)
    text = answer_text(answer)
    selected = None
    if text is not None:
        selected = next((c for c in choices if _choice_field(c, "text") == text), None)
    if selected is None:
        return ScoreBreakdown(0.0, 0.0, max_weight, False)

    option_weight = _choice_weight(selected)
    if max_weight <= 0:
        return ScoreBreakdown(0.0, option_weight, max_weight, True)

    weight = default_weight if question_weight is None else question_weight
    points = (option_weight / max_weight) * weight
    if not math.isfinite(points):
        points = 0.0
    return ScoreBreakdown(points, option_weight, max_weight, True)


def score_answer(
    question_weight: float | None,
    choices: Sequence[Any] | None,
    answer: Any,
) -> float:
    """Points for one answer; see ``score_breakdown``."""
    return score_breakdown(question_weight, choices, answer).points


def score_question(
    question: Question, answer: Any, default_weight: float = 1.0
) -> ScoreBreakdown:
    """Score an answer against a stored ``Question`` using its typed choices."""
    return score_breakdown(question.weight, question.choice_list(), answer, default_weight)


def ensure_scorable(text: str, choices: Sequence[Any] | None) -> None:
    """Raise ComputationError if no answer to this question could ever score.

    Args:
        text: Question text, used in the message.
        choices: Choices of the question.

    Raises:
        ComputationError: No choices, or no choice with a positive weight.
    """
    if not choices:
        raise ComputationError(
            f"Question '{text}' has no choices",
            "Add at least one choice with a positive weight.",
        )
    if max(_choice_weight(c) for c in choices) <= 0:
        raise ComputationError(
            f"Question '{text}' has no choice with a positive weight",
            "Every answer would score 0; give the best choice a weight above 0.",
        )

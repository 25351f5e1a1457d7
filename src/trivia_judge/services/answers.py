"""Answer intake: single-question answers and final answer batches."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pydantic
import structlog

from trivia_judge.core.config import JudgingConfig
from trivia_judge.core.errors import NotFoundError, ValidationError
from trivia_judge.models import Answer, EventType, FinalAnswerItem
from trivia_judge.models.views import AnswerReceipt, FinalReceipt
from trivia_judge.scoring import answer_text, score_question
from trivia_judge.services.events import EventSink
from trivia_judge.services.judges import JudgeService
from trivia_judge.services.results import ResultService
from trivia_judge.services.session import SessionService
from trivia_judge.services.storage import JudgingStore

logger = structlog.get_logger()


def _parse_items(answers: Any) -> list[FinalAnswerItem]:
    if not isinstance(answers, Sequence) or isinstance(answers, str | bytes):
        raise ValidationError("answers", "Expected a list of answers.")
    try:
        return [
            a if isinstance(a, FinalAnswerItem) else FinalAnswerItem.model_validate(a)
            for a in answers
        ]
    except pydantic.ValidationError as e:
        raise ValidationError("answers", str(e)) from e


class AnswerService:
    """Scores and stores what judges submit."""

    def __init__(
        self,
        config: JudgingConfig,
        store: JudgingStore,
        events: EventSink,
        sessions: SessionService,
        judges: JudgeService,
        results: ResultService,
    ) -> None:
        self.config = config
        self.store = store
        self.events = events
        self.sessions = sessions
        self.judges = judges
        self.results = results

    async def submit_single(
        self, session_id: str, judge_token: str, answer: Any, question_id: str
    ) -> AnswerReceipt:
        """Score one answer for the session's current team and append it.

        Raises:
            AuthenticationError: Unknown judge token.
            NotFoundError: Unknown session, current team or question.
            TerminalStateError: Session has ended.
        """
        judge = await self.judges.authenticate(judge_token)
        game_session = await self.sessions.load_open(session_id, "submit answers")
        team = await self.sessions.current_team(game_session)

        question = await self.store.catalog.get_question(str(question_id))
        if question is None:
            raise NotFoundError("Question", question_id)

        breakdown = score_question(question, answer, self.config.default_question_weight)
        text = answer_text(answer)
        saved = await self.store.answers.add_answer(
            Answer(
                session_id=session_id,
                team_id=team.id,
                judge_id=judge.id,
                question_id=question.id,
                answer=text,
                points=breakdown.points,
            )
        )
        logger.info(
            "answer_submitted",
            session_id=session_id,
            judge=judge.name,
            team=team.name,
            points=breakdown.points,
            matched=breakdown.matched,
        )
        await self.events.emit(
            session_id,
            EventType.ANSWER_SUBMITTED,
            {
                "judge_name": judge.name,
                "team_name": team.name,
                "answer": text,
                "points": breakdown.points,
            },
        )
        return AnswerReceipt(
            answer_id=saved.id, points=breakdown.points, team_id=team.id, team_name=team.name
        )

    async def submit_final(
        self, session_id: str, judge_token: str, team_id: str, answers: Any
    ) -> FinalReceipt:
        """Store (or replace) a judge's answer sheet for a team and recompute.

        Raises:
            AuthenticationError: Unknown judge token.
            NotFoundError: Unknown session or team.
            TerminalStateError: Session has ended.
            ValidationError: Malformed answers, or team not in the session.
        """
        judge = await self.judges.authenticate(judge_token)
        game_session = await self.sessions.load_open(session_id, "submit final answers")
        team = await self.store.catalog.get_team(str(team_id))
        if team is None:
            raise NotFoundError("Team", team_id)
        if team.name not in game_session.team_names:
            raise ValidationError("team_id", f"Team '{team.name}' is not part of this session.")

        items = _parse_items(answers)
        payload = [item.model_dump() for item in items]
        final, replaced = await self.store.answers.upsert_final(
            session_id, team.id, judge.id, payload
        )
        logger.info(
            "final_answers_saved",
            session_id=session_id,
            judge=judge.name,
            team=team.name,
            count=len(payload),
            replaced=replaced,
        )

        result = await self.results.recompute(session_id, team.id)
        await self.events.emit(
            session_id,
            EventType.FINAL_ANSWERS_SUBMITTED,
            {
                "judge_name": judge.name,
                "team_name": team.name,
                "team_id": team.id,
                "answers_count": len(final.answers),
            },
        )
        return FinalReceipt(
            team_id=team.id,
            team_name=team.name,
            answers_count=len(final.answers),
            total_points=result.total_points,
            replaced=replaced,
        )

"""Judging engine facade: one entry point for hosts, judges and displays."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from trivia_judge.core.config import JudgingConfig, SeedData, SeedQuestion
from trivia_judge.models import Question, QuestionBank, SessionEvent
from trivia_judge.models.views import (
    AnswerReceipt,
    FinalReceipt,
    HostInit,
    JudgeInfo,
    JudgeJoined,
    RoundStarted,
    SessionCreated,
    SessionResults,
    SessionSnapshot,
    SessionState,
    TeamAnswerLine,
    TeamChange,
)
from trivia_judge.scoring import LeaderboardRow, score_question
from trivia_judge.services.answers import AnswerService
from trivia_judge.services.catalog import CatalogService
from trivia_judge.services.events import EventLog, EventSink, Subscription
from trivia_judge.services.judges import JudgeService
from trivia_judge.services.results import ResultService
from trivia_judge.services.session import SessionService
from trivia_judge.services.storage import JudgingStore

logger = structlog.get_logger()


class JudgingEngine:
    """Scoring and state-transition engine for live trivia judging.

    Wires the store, the event sink and the services together. Every
    mutation is persisted before the matching event is emitted.
    """

    def __init__(
        self,
        config: JudgingConfig,
        store: JudgingStore | None = None,
        events: EventSink | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Engine configuration.
            store: Store to use; built from ``config`` when omitted.
            events: Event sink; defaults to a log-backed ``EventLog``.
        """
        self.config = config
        self.store = store or JudgingStore(config)
        self.events: EventSink = events or EventLog(self.store.events, config.event_queue_size)

        self.sessions = SessionService(config, self.store, self.events)
        self.judges = JudgeService(config, self.store, self.events)
        self.catalog = CatalogService(config, self.store)
        self.results = ResultService(config, self.store, self.events, self.sessions)
        self.answers = AnswerService(
            config, self.store, self.events, self.sessions, self.judges, self.results
        )

    # ==================== Host ====================

    async def create_session(self, team_names: Sequence[str]) -> SessionCreated:
        return await self.sessions.create(team_names)

    async def start_questions(
        self, session_id: str, question_ids: Sequence[Any], host_token: str
    ) -> RoundStarted:
        return await self.sessions.start_questions(session_id, question_ids, host_token)

    async def change_team(self, session_id: str, direction: str, host_token: str) -> TeamChange:
        return await self.sessions.change_team(session_id, direction, host_token)

    async def end_session(self, session_id: str, host_token: str) -> SessionState:
        return await self.sessions.end(session_id, host_token)

    async def host_init(self) -> HostInit:
        return await self.catalog.host_init()

    async def save_questions(
        self,
        bank_name: str,
        questions: Sequence[SeedQuestion | dict[str, Any]],
        strict: bool = False,
    ) -> tuple[QuestionBank, list[Question]]:
        return await self.catalog.save_questions(bank_name, questions, strict)

    async def seed(self, data: SeedData, strict: bool = False) -> dict[str, int]:
        return await self.catalog.seed(data, strict)

    # ==================== Judges ====================

    async def join_judge(
        self, pin: str, name: str, session_id: str | None = None
    ) -> JudgeJoined:
        return await self.judges.join(pin, name, session_id)

    async def list_judges(self, session_id: str) -> list[JudgeInfo]:
        return await self.judges.list_online(session_id)

    async def submit_answer(
        self, session_id: str, judge_token: str, answer: Any, question_id: str
    ) -> AnswerReceipt:
        return await self.answers.submit_single(session_id, judge_token, answer, question_id)

    async def submit_final_answers(
        self, session_id: str, judge_token: str, team_id: str, answers: Any
    ) -> FinalReceipt:
        return await self.answers.submit_final(session_id, judge_token, team_id, answers)

    # ==================== Reads ====================

    async def find_team(self, name: str) -> dict[str, str]:
        team = await self.catalog.find_team(name)
        return {"team_id": team.id, "name": team.name}

    async def get_state(self, session_id: str) -> SessionState:
        return await self.sessions.get_state(session_id)

    async def get_leaderboard(self, session_id: str) -> list[LeaderboardRow]:
        return await self.results.leaderboard(session_id)

    async def all_results(self) -> list[SessionResults]:
        return await self.results.all_results()

    async def get_snapshot(self, session_id: str) -> SessionSnapshot:
        """Denormalized session view for clients that missed events.

        Single answers appear one line each. Each final batch appears as one
        summary line with its item count and the points its items score.
        """
        state = await self.sessions.get_state(session_id)
        answers = await self.store.answers.list_answers(session_id)
        finals = await self.store.answers.list_finals(session_id)

        team_ids = {a.team_id for a in answers} | {f.team_id for f in finals}
        judge_ids = {a.judge_id for a in answers} | {f.judge_id for f in finals}
        teams = await self.store.catalog.teams_by_id(sorted(team_ids))
        judges = await self.store.judges.judges_by_id(sorted(judge_ids))
        asked = await self.store.catalog.questions_by_id(sorted({a.question_id for a in answers}))
        session_questions = {q.id: q for q in await self.store.sessions.questions_for(session_id)}

        def team_name(team_id: str) -> str:
            return teams[team_id].name if team_id in teams else team_id

        def judge_name(judge_id: str) -> str:
            return judges[judge_id].name if judge_id in judges else judge_id

        answers_by_team: dict[str, list[TeamAnswerLine]] = {}
        for answer in answers:
            question = asked.get(answer.question_id)
            answers_by_team.setdefault(team_name(answer.team_id), []).append(
                TeamAnswerLine(
                    player=judge_name(answer.judge_id),
                    answer=answer.answer,
                    points=answer.points,
                    question=question.text if question else None,
                )
            )

        for final in finals:
            items = final.items()
            points = sum(
                score_question(
                    session_questions[item.question_id],
                    item.answer,
                    self.config.default_question_weight,
                ).points
                for item in items
                if item.question_id in session_questions
            )
            answers_by_team.setdefault(team_name(final.team_id), []).append(
                TeamAnswerLine(
                    player=judge_name(final.judge_id),
                    answer=f"{len(items)} answers",
                    points=round(points, self.config.result_precision),
                )
            )

        leaderboard = await self.results.leaderboard(session_id)
        return SessionSnapshot(
            **state.model_dump(), answers_by_team=answers_by_team, leaderboard=leaderboard
        )

    # ==================== Events ====================

    async def session_events(
        self, session_id: str, after: int | None = None
    ) -> list[SessionEvent]:
        """Stored events of a session in emission order."""
        await self.sessions.load(session_id)
        return await self.store.events.events_for(session_id, after)

    def subscribe(self, session_id: str) -> Subscription:
        """Live feed of a session's events; requires the default ``EventLog``."""
        if not isinstance(self.events, EventLog):
            raise TypeError("Live subscriptions need the built-in EventLog sink")
        return self.events.subscribe(session_id)

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        await self.store.close()
        logger.debug("engine_closed")

    async def __aenter__(self) -> JudgingEngine:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()

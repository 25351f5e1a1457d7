"""Result computation: ledgers, totals and leaderboards."""

from __future__ import annotations

import asyncio

import structlog

from trivia_judge.core.config import JudgingConfig
from trivia_judge.models import EventType, LedgerEntry, SessionResult
from trivia_judge.models.views import SessionResults, TeamResult
from trivia_judge.scoring import LeaderboardRow, build_leaderboard, score_question
from trivia_judge.services.events import EventSink
from trivia_judge.services.session import SessionService
from trivia_judge.services.storage import JudgingStore

logger = structlog.get_logger()


class ResultService:
    """Derives per-team results from final answer batches.

    A result is always rebuilt from every final batch of the team, never
    patched incrementally, so recomputing twice yields the same ledger and
    total.
    """

    def __init__(
        self,
        config: JudgingConfig,
        store: JudgingStore,
        events: EventSink,
        sessions: SessionService,
    ) -> None:
        self.config = config
        self.store = store
        self.events = events
        self.sessions = sessions
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}

    async def recompute(self, session_id: str, team_id: str) -> SessionResult:
        """Rebuild and persist the result of one team in one session.

        Entries referring to a question outside the session's question set
        are skipped. Recomputes of the same team run one at a time, so the
        last one to save has read every batch stored before it started.
        """
        async with self._locks.setdefault((session_id, team_id), asyncio.Lock()):
            result, skipped = await self._rebuild(session_id, team_id)

        if skipped:
            logger.warning(
                "ledger_items_skipped", session_id=session_id, team_id=team_id, skipped=skipped
            )
        logger.info(
            "result_recomputed",
            session_id=session_id,
            team_id=team_id,
            entries=len(result.ledger()),
            total=result.total_points,
        )

        board = await self.leaderboard(session_id)
        session_total = round(sum(r.total_points for r in board), self.config.result_precision)
        await self.store.sessions.set_total_points(session_id, session_total)

        await self.events.emit(
            session_id,
            EventType.LEADERBOARD_UPDATED,
            {"team_id": team_id, "total_points": result.total_points},
        )
        return result

    async def _rebuild(self, session_id: str, team_id: str) -> tuple[SessionResult, int]:
        questions = {q.id: q for q in await self.store.sessions.questions_for(session_id)}
        finals = await self.store.answers.finals_for_team(session_id, team_id)
        judges = await self.store.judges.judges_by_id([f.judge_id for f in finals])

        ledger: list[dict] = []
        skipped = 0
        for final in finals:
            judge = judges.get(final.judge_id)
            judge_name = judge.name if judge else final.judge_id
            for item in final.items():
                question = questions.get(item.question_id)
                if question is None:
                    skipped += 1
                    continue
                breakdown = score_question(
                    question, item.answer, self.config.default_question_weight
                )
                entry = LedgerEntry(
                    question_id=question.id,
                    question_text=question.text,
                    question_weight=question.weight,
                    judge_name=judge_name,
                    answer=item.answer,
                    points=breakdown.points,
                    option_weight=breakdown.option_weight,
                    max_option_weight=breakdown.max_option_weight,
                )
                ledger.append(entry.model_dump())

        total = round(sum(e["points"] for e in ledger), self.config.result_precision)
        result = await self.store.results.save_result(session_id, team_id, total, ledger)
        return result, skipped

    async def leaderboard(self, session_id: str) -> list[LeaderboardRow]:
        """Ranked teams of a session, including teams without a result."""
        game_session = await self.sessions.load(session_id)
        results = await self.store.results.results_for(session_id)
        teams = await self.store.catalog.teams_by_id([r.team_id for r in results])
        rows = [
            (r.team_id, teams[r.team_id].name if r.team_id in teams else r.team_id, r.ledger())
            for r in results
        ]
        return build_leaderboard(
            rows, game_session.team_names, precision=self.config.result_precision
        )

    async def all_results(self) -> list[SessionResults]:
        """Results of every ended session, newest session first."""
        output: list[SessionResults] = []
        for game_session in await self.store.sessions.list_ended():
            results = await self.store.results.results_for(game_session.id)
            teams = await self.store.catalog.teams_by_id([r.team_id for r in results])
            team_results = [
                TeamResult(
                    team_id=r.team_id,
                    team_name=teams[r.team_id].name if r.team_id in teams else r.team_id,
                    total_points=r.total_points,
                    details=r.ledger(),
                )
                for r in results
            ]
            team_results.sort(key=lambda t: (-t.total_points, t.team_name))
            output.append(
                SessionResults(
                    session_id=game_session.id,
                    name=game_session.name,
                    created_at=game_session.created_at,
                    results=team_results,
                )
            )
        return output

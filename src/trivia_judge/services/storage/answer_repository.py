"""Database persistence for single answers and final answer batches."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import Session, col, select

from trivia_judge.models import Answer, FinalAnswer

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class AnswerRepository(AsyncRepository):
    """Persist and query judge submissions."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def add_answer(self, answer: Answer) -> Answer:
        """Append a single-question answer."""

        def _save(db: Session) -> Answer:
            db.add(answer)
            db.commit()
            return answer

        return await self._run_session(_save)

    async def list_answers(self, session_id: str) -> list[Answer]:
        def _get(db: Session) -> list[Answer]:
            statement = (
                select(Answer)
                .where(Answer.session_id == session_id)
                .order_by(col(Answer.created_at))
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

    async def upsert_final(
        self,
        session_id: str,
        team_id: str,
        judge_id: str,
        answers: Sequence[dict[str, Any]],
    ) -> tuple[FinalAnswer, bool]:
        """Save a judge's batch for a team, replacing any earlier one.

        Keyed by (session, team, judge); last write wins.

        Returns:
            Tuple of (final answer row, replaced_existing).
        """
        payload = [dict(a) for a in answers]

        def _upsert(db: Session) -> tuple[FinalAnswer, bool]:
            statement = select(FinalAnswer).where(
                FinalAnswer.session_id == session_id,
                FinalAnswer.team_id == team_id,
                FinalAnswer.judge_id == judge_id,
            )
            existing = db.exec(statement).first()
            if existing is not None:
                existing.answers = payload
                existing.updated_at = datetime.now(UTC)
                db.add(existing)
                db.commit()
                return existing, True

            final = FinalAnswer(
                session_id=session_id,
                team_id=team_id,
                judge_id=judge_id,
                answers=payload,
            )
            db.add(final)
            db.commit()
            return final, False

        return await self._run_upsert(_upsert)

    async def finals_for_team(self, session_id: str, team_id: str) -> list[FinalAnswer]:
        def _get(db: Session) -> list[FinalAnswer]:
            statement = (
                select(FinalAnswer)
                .where(FinalAnswer.session_id == session_id, FinalAnswer.team_id == team_id)
                .order_by(col(FinalAnswer.judge_id))
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

    async def list_finals(self, session_id: str) -> list[FinalAnswer]:
        def _get(db: Session) -> list[FinalAnswer]:
            statement = (
                select(FinalAnswer)
                .where(FinalAnswer.session_id == session_id)
                .order_by(col(FinalAnswer.updated_at))
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

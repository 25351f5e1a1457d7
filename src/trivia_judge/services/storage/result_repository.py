"""Database persistence for per-team session results."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import Session, col, select

from trivia_judge.models import SessionResult

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class ResultRepository(AsyncRepository):
    """Persist and query session results."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def save_result(
        self,
        session_id: str,
        team_id: str,
        total_points: float,
        ledger: Sequence[dict[str, Any]],
    ) -> SessionResult:
        """Save or fully overwrite the result row for (session, team)."""
        details = {"answers": [dict(entry) for entry in ledger]}

        def _upsert(db: Session) -> SessionResult:
            statement = select(SessionResult).where(
                SessionResult.session_id == session_id,
                SessionResult.team_id == team_id,
            )
            result = db.exec(statement).first()
            if result is None:
                result = SessionResult(session_id=session_id, team_id=team_id)
            result.total_points = total_points
            result.details = details
            result.updated_at = datetime.now(UTC)
            db.add(result)
            db.commit()
            return result

        return await self._run_upsert(_upsert)

    async def get_result(self, session_id: str, team_id: str) -> SessionResult | None:
        def _get(db: Session) -> SessionResult | None:
            statement = select(SessionResult).where(
                SessionResult.session_id == session_id,
                SessionResult.team_id == team_id,
            )
            return db.exec(statement).first()

        return await self._run_session(_get)

    async def results_for(self, session_id: str) -> list[SessionResult]:
        """All result rows of a session in insertion-independent order."""

        def _get(db: Session) -> list[SessionResult]:
            statement = (
                select(SessionResult)
                .where(SessionResult.session_id == session_id)
                .order_by(col(SessionResult.team_id))
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

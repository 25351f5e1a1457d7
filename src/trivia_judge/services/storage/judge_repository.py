"""Database persistence for judges."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlmodel import Session, col, select

from trivia_judge.models import Judge

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class JudgeRepository(AsyncRepository):
    """Persist and query judges."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def join(self, name: str, judge_token: str, session_id: str | None) -> Judge:
        """Create or re-activate a judge by name with a fresh token."""

        def _upsert(db: Session) -> Judge:
            judge = db.exec(select(Judge).where(Judge.name == name)).first()
            if judge is None:
                judge = Judge(name=name, judge_token=judge_token)
            judge.judge_token = judge_token
            judge.is_online = True
            judge.session_id = session_id
            db.add(judge)
            db.commit()
            return judge

        return await self._run_upsert(_upsert)

    async def find_by_token(self, judge_token: str) -> Judge | None:
        def _get(db: Session) -> Judge | None:
            return db.exec(select(Judge).where(Judge.judge_token == judge_token)).first()

        return await self._run_session(_get)

    async def list_online(self, session_id: str) -> list[Judge]:
        def _get(db: Session) -> list[Judge]:
            statement = (
                select(Judge)
                .where(Judge.session_id == session_id, col(Judge.is_online).is_(True))
                .order_by(col(Judge.name))
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

    async def judges_by_id(self, judge_ids: Sequence[str]) -> dict[str, Judge]:
        def _get(db: Session) -> dict[str, Judge]:
            judges = db.exec(select(Judge).where(col(Judge.id).in_(list(judge_ids)))).all()
            return {j.id: j for j in judges}

        return await self._run_session(_get)

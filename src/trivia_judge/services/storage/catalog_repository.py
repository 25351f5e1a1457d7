"""Database persistence for teams, question banks and questions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlmodel import Session, col, select

from trivia_judge.models import Question, QuestionBank, Team

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


def _team_sort_key(team: Team) -> tuple[bool, str, str]:
    # Uncategorized teams sort last.
    return (team.team_category is None, team.team_category or "", team.name)


class CatalogRepository(AsyncRepository):
    """Persist and query teams and the question catalog."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    # ==================== Teams ====================

    async def ensure_team(self, name: str, category: str | None = None) -> tuple[Team, bool]:
        """Get or create a team by name.

        Idempotent: concurrent callers racing on the same name all end up with
        the single row the unique constraint let through. A category, when
        given, overwrites the stored one.

        Returns:
            Tuple of (team, created).
        """

        def _upsert(db: Session) -> tuple[Team, bool]:
            team = db.exec(select(Team).where(Team.name == name)).first()
            if team is not None:
                if category is not None and team.team_category != category:
                    team.team_category = category
                    db.add(team)
                    db.commit()
                return team, False
            team = Team(name=name, team_category=category)
            db.add(team)
            db.commit()
            return team, True

        return await self._run_upsert(_upsert)

    async def get_team(self, team_id: str) -> Team | None:
        def _get(db: Session) -> Team | None:
            return db.get(Team, team_id)

        return await self._run_session(_get)

    async def find_team(self, name: str) -> Team | None:
        def _get(db: Session) -> Team | None:
            return db.exec(select(Team).where(Team.name == name)).first()

        return await self._run_session(_get)

    async def teams_by_id(self, team_ids: Sequence[str]) -> dict[str, Team]:
        def _get(db: Session) -> dict[str, Team]:
            teams = db.exec(select(Team).where(col(Team.id).in_(list(team_ids)))).all()
            return {t.id: t for t in teams}

        return await self._run_session(_get)

    async def list_teams(self) -> list[Team]:
        """All teams ordered by category, then name."""

        def _get(db: Session) -> list[Team]:
            return sorted(db.exec(select(Team)).all(), key=_team_sort_key)

        return await self._run_session(_get)

    # ==================== Questions ====================

    async def save_bank(
        self, bank_name: str, questions: Sequence[Question]
    ) -> tuple[QuestionBank, list[Question]]:
        """Upsert a bank by name and insert its questions in one transaction."""

        def _save(db: Session) -> tuple[QuestionBank, list[Question]]:
            bank = db.exec(select(QuestionBank).where(QuestionBank.name == bank_name)).first()
            if bank is None:
                bank = QuestionBank(name=bank_name)
                db.add(bank)
                db.flush()
            saved = []
            for question in questions:
                question.bank_id = bank.id
                db.add(question)
                saved.append(question)
            db.commit()
            return bank, saved

        return await self._run_upsert(_save)

    async def find_bank(self, bank_name: str) -> QuestionBank | None:
        def _get(db: Session) -> QuestionBank | None:
            return db.exec(select(QuestionBank).where(QuestionBank.name == bank_name)).first()

        return await self._run_session(_get)

    async def get_question(self, question_id: str) -> Question | None:
        def _get(db: Session) -> Question | None:
            return db.get(Question, question_id)

        return await self._run_session(_get)

    async def questions_by_id(self, question_ids: Sequence[str]) -> dict[str, Question]:
        def _get(db: Session) -> dict[str, Question]:
            statement = select(Question).where(col(Question.id).in_(list(question_ids)))
            return {q.id: q for q in db.exec(statement).all()}

        return await self._run_session(_get)

    async def list_questions(self) -> list[Question]:
        """All questions in creation order."""

        def _get(db: Session) -> list[Question]:
            statement = select(Question).order_by(col(Question.created_at))
            return list(db.exec(statement).all())

        return await self._run_session(_get)

    async def list_banks(self) -> list[QuestionBank]:
        def _get(db: Session) -> list[QuestionBank]:
            statement = select(QuestionBank).order_by(col(QuestionBank.name))
            return list(db.exec(statement).all())

        return await self._run_session(_get)

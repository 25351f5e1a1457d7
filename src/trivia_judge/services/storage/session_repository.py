"""Database persistence for sessions and their team/question links."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import update
from sqlmodel import Session, col, select

from trivia_judge.models import (
    GameSession,
    Judge,
    Question,
    SessionQuestion,
    SessionStatus,
    SessionTeam,
    Team,
)

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

OPEN_STATUSES = (SessionStatus.WAITING.value, SessionStatus.ACTIVE.value)


def _cas_update(
    db: Session, session_id: str, expected_version: int, values: dict[str, Any]
) -> bool:
    """Apply ``values`` only if the row is still at ``expected_version``."""
    statement = (
        update(GameSession)
        .where(
            col(GameSession.id) == session_id,
            col(GameSession.version) == expected_version,
        )
        .values(**values, version=expected_version + 1)
        .returning(col(GameSession.version))
        .execution_options(synchronize_session=False)
    )
    return db.exec(statement).first() is not None  # type: ignore[call-overload]


def _question_payload(question: Question) -> dict[str, Any]:
    return {
        "id": question.id,
        "text": question.text,
        "section": question.section,
        "weight": question.weight,
        "choices": list(question.choices or []),
        "correct": question.correct,
    }


class SessionRepository(AsyncRepository):
    """Persist and query sessions."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def create(self, game_session: GameSession) -> GameSession:
        """Insert a session and link the already-known teams it names."""

        def _save(db: Session) -> GameSession:
            db.add(game_session)
            teams = db.exec(
                select(Team).where(col(Team.name).in_(game_session.team_names))
            ).all()
            for team in teams:
                db.add(SessionTeam(session_id=game_session.id, team_id=team.id))
            db.commit()
            db.refresh(game_session)
            return game_session

        return await self._run_session(_save)

    async def get(self, session_id: str) -> GameSession | None:
        def _get(db: Session) -> GameSession | None:
            return db.get(GameSession, session_id)

        return await self._run_session(_get)

    async def find_open(self, session_id: str | None = None) -> GameSession | None:
        """Find a waiting/active session by id, or the newest one when id is None."""

        def _get(db: Session) -> GameSession | None:
            statement = select(GameSession).where(col(GameSession.status).in_(OPEN_STATUSES))
            if session_id:
                statement = statement.where(GameSession.id == session_id)
            statement = statement.order_by(col(GameSession.created_at).desc())
            return db.exec(statement).first()

        return await self._run_session(_get)

    async def update_if_version(
        self, session_id: str, expected_version: int, **values: Any
    ) -> bool:
        """Compare-and-swap update of session fields.

        Returns:
            False if another writer bumped the version first.
        """

        def _update(db: Session) -> bool:
            swapped = _cas_update(db, session_id, expected_version, values)
            if swapped:
                db.commit()
            else:
                db.rollback()
            return swapped

        return await self._run_session(_update)

    async def start_round(
        self,
        session_id: str,
        expected_version: int,
        question_ids: Sequence[str],
        team_name: str,
    ) -> tuple[list[Question], Team, bool] | None:
        """Attach questions, resolve the current team and activate, atomically.

        The team is fetched by name or created in the same transaction, so a
        lost compare-and-swap leaves no team row behind. Unknown question ids
        are ignored; already-linked questions and teams are not linked twice.

        Returns:
            Tuple of (attached questions, team, team created), or None if the
            compare-and-swap lost.
        """

        def _start(db: Session) -> tuple[list[Question], Team, bool] | None:
            team = db.exec(select(Team).where(Team.name == team_name)).first()
            created = team is None
            if team is None:
                team = Team(name=team_name)
                db.add(team)

            questions = list(
                db.exec(select(Question).where(col(Question.id).in_(list(question_ids)))).all()
            )
            order = {qid: idx for idx, qid in enumerate(question_ids)}
            questions.sort(key=lambda q: order.get(q.id, len(order)))

            linked = set(
                db.exec(
                    select(SessionQuestion.question_id).where(
                        SessionQuestion.session_id == session_id
                    )
                ).all()
            )
            for question in questions:
                if question.id not in linked:
                    db.add(SessionQuestion(session_id=session_id, question_id=question.id))
                    linked.add(question.id)

            team_linked = db.exec(
                select(SessionTeam).where(
                    SessionTeam.session_id == session_id, SessionTeam.team_id == team.id
                )
            ).first()
            if team_linked is None:
                db.add(SessionTeam(session_id=session_id, team_id=team.id))

            swapped = _cas_update(
                db,
                session_id,
                expected_version,
                {
                    "current_questions": [_question_payload(q) for q in questions],
                    "current_team_id": team.id,
                    "status": SessionStatus.ACTIVE.value,
                },
            )
            if not swapped:
                db.rollback()
                return None
            db.commit()
            return questions, team, created

        return await self._run_upsert(_start)

    async def end(self, session_id: str, expected_version: int) -> int | None:
        """Mark the session ended and its judges offline, atomically.

        Returns:
            Number of judges set offline, or None if the compare-and-swap lost.
        """

        def _end(db: Session) -> int | None:
            if not _cas_update(
                db, session_id, expected_version, {"status": SessionStatus.ENDED.value}
            ):
                db.rollback()
                return None
            judges = db.exec(select(Judge).where(Judge.session_id == session_id)).all()
            for judge in judges:
                judge.is_online = False
                db.add(judge)
            db.commit()
            return len(judges)

        return await self._run_session(_end)

    async def questions_for(self, session_id: str) -> list[Question]:
        """All questions ever attached to a session."""

        def _get(db: Session) -> list[Question]:
            statement = (
                select(Question)
                .join(SessionQuestion, col(SessionQuestion.question_id) == col(Question.id))
                .where(SessionQuestion.session_id == session_id)
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

    async def list_ended(self) -> list[GameSession]:
        """Ended sessions, newest first."""

        def _get(db: Session) -> list[GameSession]:
            statement = (
                select(GameSession)
                .where(GameSession.status == SessionStatus.ENDED.value)
                .order_by(col(GameSession.created_at).desc())
            )
            return list(db.exec(statement).all())

        return await self._run_session(_get)

    async def set_total_points(self, session_id: str, total_points: float) -> None:
        """Refresh the cached session total; not a state transition, no version bump."""

        def _update(db: Session) -> None:
            db.exec(  # type: ignore[call-overload]
                update(GameSession)
                .where(col(GameSession.id) == session_id)
                .values(total_points=total_points)
                .execution_options(synchronize_session=False)
            )
            db.commit()

        await self._run_session(_update)

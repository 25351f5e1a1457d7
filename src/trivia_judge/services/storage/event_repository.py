"""Database persistence for the append-only session event log."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func
from sqlmodel import Session, col, select

from trivia_judge.models import SessionEvent

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class EventRepository(AsyncRepository):
    """Append and replay session events."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def append(
        self, session_id: str, event_type: str, event_data: dict[str, Any]
    ) -> SessionEvent:
        """Append an event with the next per-session sequence number."""

        def _append(db: Session) -> SessionEvent:
            last = db.exec(
                select(func.max(SessionEvent.sequence)).where(
                    SessionEvent.session_id == session_id
                )
            ).one()
            event = SessionEvent(
                session_id=session_id,
                sequence=(last or 0) + 1,
                event_type=event_type,
                event_data=event_data,
            )
            db.add(event)
            db.commit()
            return event

        return await self._run_upsert(_append)

    async def events_for(self, session_id: str, after: int | None = None) -> list[SessionEvent]:
        """Events of a session in order, optionally after a sequence number."""

        def _get(db: Session) -> list[SessionEvent]:
            statement = select(SessionEvent).where(SessionEvent.session_id == session_id)
            if after is not None:
                statement = statement.where(SessionEvent.sequence > after)
            statement = statement.order_by(col(SessionEvent.sequence))
            return list(db.exec(statement).all())

        return await self._run_session(_get)

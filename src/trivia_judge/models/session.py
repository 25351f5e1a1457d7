import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import JSON, Field, SQLModel


class SessionStatus(StrEnum):
    """Lifecycle of a judging session. ``ended`` is terminal."""

    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


class GameSession(SQLModel, table=True):
    """One run of the event with its own team rotation and question set.

    ``version`` is bumped on every state transition and used for
    compare-and-swap updates.
    """

    __tablename__ = "game_session"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    host_token: str
    team_names: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    current_team_index: int = 0
    current_team_id: str | None = None
    current_questions: list[dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON)
    )
    status: str = SessionStatus.WAITING.value
    total_points: float = 0.0
    version: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def current_team_name(self) -> str | None:
        if 0 <= self.current_team_index < len(self.team_names):
            return self.team_names[self.current_team_index]
        return None

    @property
    def is_ended(self) -> bool:
        return self.status == SessionStatus.ENDED


class SessionTeam(SQLModel, table=True):
    """Links a session to a team record it rotates through."""

    __tablename__ = "session_team"
    __table_args__ = (UniqueConstraint("session_id", "team_id"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    team_id: str = Field(index=True)


class SessionQuestion(SQLModel, table=True):
    """Links a session to a question attached by the host."""

    __tablename__ = "session_question"
    __table_args__ = (UniqueConstraint("session_id", "question_id"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    question_id: str = Field(index=True)

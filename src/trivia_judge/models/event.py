import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import JSON, Field, SQLModel


class EventType(StrEnum):
    """Notification types written to the session event log."""

    SESSION_CREATED = "session_created"
    QUESTIONS_STARTED = "questions_started"
    TEAM_CHANGED = "team_changed"
    ANSWER_SUBMITTED = "answer_submitted"
    FINAL_ANSWERS_SUBMITTED = "final_answers_submitted"
    LEADERBOARD_UPDATED = "leaderboard_updated"
    SESSION_ENDED = "session_ended"
    JUDGE_JOINED = "judge_joined"


class SessionEvent(SQLModel, table=True):
    """Append-only log entry; ``sequence`` is gapless per session."""

    __tablename__ = "session_event"
    __table_args__ = (UniqueConstraint("session_id", "sequence"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    sequence: int
    event_type: str = Field(index=True)
    event_data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Column, UniqueConstraint
from sqlmodel import JSON, Field, SQLModel


class LedgerEntry(BaseModel):
    """One scored answer contributing to a team total."""

    question_id: str
    question_text: str
    question_weight: float
    judge_name: str
    answer: str | dict[str, Any] | None = None
    points: float
    option_weight: float
    max_option_weight: float


class SessionResult(SQLModel, table=True):
    """Per (session, team) total plus the ledger it was derived from.

    Always written as a full overwrite by the result computer.
    """

    __tablename__ = "session_result"
    __table_args__ = (UniqueConstraint("session_id", "team_id"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    team_id: str = Field(index=True)
    total_points: float = 0.0
    details: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def ledger(self) -> list[dict[str, Any]]:
        """Raw ledger rows as stored (kept loose for defensive re-summing)."""
        return list((self.details or {}).get("answers") or [])

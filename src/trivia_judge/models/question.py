import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel


class Choice(BaseModel):
    """A weighted answer option. ``correct`` is for display only."""

    text: str
    weight: float = 0.0
    correct: bool = False


class QuestionBank(SQLModel, table=True):
    """Named group of questions."""

    __tablename__ = "question_bank"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Question(SQLModel, table=True):
    """A question with a point multiplier and weighted choices."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    text: str
    section: str | None = Field(default=None, index=True)
    weight: float = 1.0
    choices: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    correct: str | None = None
    bank_id: str | None = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def choice_list(self) -> list[Choice]:
        """Choices as typed models, in authored order."""
        return [Choice.model_validate(c) for c in self.choices or []]

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "section": self.section,
            "weight": self.weight,
        }

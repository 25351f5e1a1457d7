import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel
from pydantic import Field as PydanticField
from sqlalchemy import Column, UniqueConstraint
from sqlmodel import JSON, Field, SQLModel


class Answer(SQLModel, table=True):
    """One judge's single-question submission. Append-only."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    team_id: str = Field(index=True)
    judge_id: str = Field(index=True)
    question_id: str
    answer: str | None = None
    points: float = 0.0
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class FinalAnswerItem(BaseModel):
    """One entry of a final batch: the question and the chosen answer.

    ``answer`` is either the choice text or an object carrying ``text``.
    ``questionIndex`` is accepted as an alias of ``question_id``.
    """

    question_id: str = PydanticField(
        validation_alias=AliasChoices("question_id", "questionIndex", "questionId")
    )
    answer: str | dict[str, Any] | None = None


class FinalAnswer(SQLModel, table=True):
    """A judge's resubmittable answer sheet for one team in one session."""

    __tablename__ = "final_answer"
    __table_args__ = (UniqueConstraint("session_id", "team_id", "judge_id"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    session_id: str = Field(index=True)
    team_id: str = Field(index=True)
    judge_id: str
    answers: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def items(self) -> list[FinalAnswerItem]:
        return [FinalAnswerItem.model_validate(a) for a in self.answers or []]

import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Judge(SQLModel, table=True):
    """A judge scoring teams; the token rotates on every join."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True)
    judge_token: str
    is_online: bool = True
    session_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

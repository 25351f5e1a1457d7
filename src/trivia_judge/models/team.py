import uuid

from sqlmodel import Field, SQLModel


class Team(SQLModel, table=True):
    """A competing team. Long-lived, shared across sessions."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(unique=True, index=True)
    team_category: str | None = None

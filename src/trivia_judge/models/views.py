"""Response models returned by the engine facade.

Plain pydantic models: transport layers call ``model_dump(mode="json")``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from trivia_judge.scoring.leaderboard import LeaderboardRow


class SessionCreated(BaseModel):
    session_id: str
    host_token: str
    teams: list[str]


class RoundStarted(BaseModel):
    session_id: str
    team_id: str
    current_team: str
    team_created: bool = False
    questions: list[dict[str, Any]] = Field(default_factory=list)


class TeamChange(BaseModel):
    current_team: str | None
    current_team_index: int
    current_team_id: str | None = None


class JudgeInfo(BaseModel):
    id: str
    name: str
    is_online: bool = True


class JudgeJoined(BaseModel):
    judge: JudgeInfo
    judge_token: str
    session_id: str | None = None


class AnswerReceipt(BaseModel):
    answer_id: str
    points: float
    team_id: str
    team_name: str


class FinalReceipt(BaseModel):
    team_id: str
    team_name: str
    answers_count: int
    total_points: float
    replaced: bool = False


class SessionState(BaseModel):
    """Current state of a session as shown to hosts and judges."""

    session_id: str
    status: str
    current_team_index: int
    current_team: str | None
    current_team_id: str | None
    teams: list[str]
    current_questions: list[dict[str, Any]] = Field(default_factory=list)
    total_points: float = 0.0
    judges: list[JudgeInfo] = Field(default_factory=list)
    version: int = 0


class TeamAnswerLine(BaseModel):
    """One line of a team's answer ledger in a snapshot."""

    player: str
    answer: str | None
    points: float
    question: str | None = None


class SessionSnapshot(SessionState):
    """Full denormalized view: state, per-team answers and leaderboard."""

    answers_by_team: dict[str, list[TeamAnswerLine]] = Field(default_factory=dict)
    leaderboard: list[LeaderboardRow] = Field(default_factory=list)


class HostInit(BaseModel):
    """Catalog data a host needs to set up a session."""

    teams: list[str]
    team_categories: dict[str, list[str]]
    questions: list[dict[str, Any]]
    question_banks: list[dict[str, Any]]
    sections: list[str]


class TeamResult(BaseModel):
    team_id: str
    team_name: str
    total_points: float
    details: list[dict[str, Any]] = Field(default_factory=list)


class SessionResults(BaseModel):
    session_id: str
    name: str
    created_at: datetime
    results: list[TeamResult] = Field(default_factory=list)

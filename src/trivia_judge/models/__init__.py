from trivia_judge.models.answer import Answer, FinalAnswer, FinalAnswerItem
from trivia_judge.models.event import EventType, SessionEvent
from trivia_judge.models.judge import Judge
from trivia_judge.models.question import Choice, Question, QuestionBank
from trivia_judge.models.result import LedgerEntry, SessionResult
from trivia_judge.models.session import (
    GameSession,
    SessionQuestion,
    SessionStatus,
    SessionTeam,
)
from trivia_judge.models.team import Team

__all__ = [
    "Answer",
    "Choice",
    "EventType",
    "FinalAnswer",
    "FinalAnswerItem",
    "GameSession",
    "Judge",
    "LedgerEntry",
    "Question",
    "QuestionBank",
    "SessionEvent",
    "SessionQuestion",
    "SessionResult",
    "SessionStatus",
    "SessionTeam",
    "Team",
]

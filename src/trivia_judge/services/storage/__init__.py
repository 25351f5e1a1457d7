from .answer_repository import AnswerRepository
from .catalog_repository import CatalogRepository
from .event_repository import EventRepository
from .judge_repository import JudgeRepository
from .result_repository import ResultRepository
from .session_repository import SessionRepository
from .store import JudgingStore

__all__ = [
    "AnswerRepository",
    "CatalogRepository",
    "EventRepository",
    "JudgeRepository",
    "JudgingStore",
    "ResultRepository",
    "SessionRepository",
]

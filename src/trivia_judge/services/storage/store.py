"""Unified judging storage layer: engine lifecycle plus per-aggregate repositories."""

from __future__ import annotations

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

# Imported for its side effect of registering every table on SQLModel.metadata.
import trivia_judge.models  # noqa: F401
from trivia_judge.core.config import JudgingConfig

from .answer_repository import AnswerRepository
from .catalog_repository import CatalogRepository
from .event_repository import EventRepository
from .judge_repository import JudgeRepository
from .result_repository import ResultRepository
from .session_repository import SessionRepository

logger = structlog.get_logger()


class JudgingStore:
    """Persistence layer for judging data.

    Owns one SQLAlchemy engine (DuckDB by default, any SQLAlchemy URL works)
    and exposes a repository per aggregate:
    - sessions: sessions, team/question links, state transitions
    - catalog: teams, question banks, questions
    - judges, answers, results, events
    """

    def __init__(self, config: JudgingConfig) -> None:
        """Initialize judging store.

        Args:
            config: Engine configuration; decides the database URL.
        """
        self.config = config
        self.database_url = config.get_database_url()
        self._engine = None
        self._init_db()

        self.sessions = SessionRepository(self._engine)
        self.catalog = CatalogRepository(self._engine)
        self.judges = JudgeRepository(self._engine)
        self.answers = AnswerRepository(self._engine)
        self.results = ResultRepository(self._engine)
        self.events = EventRepository(self._engine)

    def _init_db(self) -> None:
        """Create the engine and all tables."""
        # Use NullPool to avoid connection pooling issues on Windows
        self._engine = create_engine(self.database_url, poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)
        logger.info(
            "store_init",
            backend=make_url(self.database_url).get_backend_name(),
            url=make_url(self.database_url).render_as_string(hide_password=True),
        )

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()

"""Shared async repository helpers for SQLModel session work."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")

logger = structlog.get_logger()

UPSERT_ATTEMPTS = 3


class AsyncRepository(Generic[T]):
    """Wrap sync SQLModel session work for async callers.

    Each call runs in its own Session on a worker thread, so one repository
    call is one transaction: either ``fn`` commits or nothing is written.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    async def _run_session(self, fn: Callable[[Session], T]) -> T:
        """Run a sync function inside a Session on a worker thread."""

        def _run() -> T:
            with Session(self._engine, expire_on_commit=False) as session:
                return fn(session)

        return await asyncio.to_thread(_run)

    async def _run_upsert(self, fn: Callable[[Session], T]) -> T:
        """Run a select-then-write function, retrying on unique-key races.

        A concurrent writer inserting the same key makes our insert fail on
        the unique constraint; the retry then sees that row and updates it.
        """

        def _run() -> T:
            for attempt in range(1, UPSERT_ATTEMPTS + 1):
                with Session(self._engine, expire_on_commit=False) as session:
                    try:
                        return fn(session)
                    except IntegrityError:
                        session.rollback()
                        if attempt == UPSERT_ATTEMPTS:
                            raise
                        logger.debug("upsert_conflict_retry", attempt=attempt)
            raise AssertionError("unreachable")

        return await asyncio.to_thread(_run)

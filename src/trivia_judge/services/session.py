"""Session state machine: lifecycle, team rotation and host authority."""

from __future__ import annotations

import secrets
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import structlog

from trivia_judge.core.config import JudgingConfig
from trivia_judge.core.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)
from trivia_judge.models import EventType, GameSession, Team
from trivia_judge.models.views import (
    JudgeInfo,
    RoundStarted,
    SessionCreated,
    SessionState,
    TeamChange,
)
from trivia_judge.services.events import EventSink
from trivia_judge.services.storage import JudgingStore

logger = structlog.get_logger()


def _normalize_question_ids(question_ids: Sequence[Any]) -> list[str]:
    """Accept bare ids or objects carrying ``id``; drop duplicates, keep order."""
    ids: list[str] = []
    for item in question_ids:
        raw = item.get("id") if isinstance(item, dict) else getattr(item, "id", item)
        if raw is None or str(raw).strip() == "":
            continue
        qid = str(raw)
        if qid not in ids:
            ids.append(qid)
    return ids


def next_team_index(current: int, team_count: int, direction: str) -> int:
    """Move the team pointer one step, clamped to [0, team_count - 1].

    Stepping past either end leaves the index unchanged.
    """
    if direction == "next" and current < team_count - 1:
        return current + 1
    if direction == "previous" and current > 0:
        return current - 1
    return current


class SessionService:
    """Owns session status, the current-team pointer and question sets.

    Transitions are written with compare-and-swap on ``GameSession.version``:
    a writer that read a stale session gets ConcurrentUpdateError instead of
    silently overwriting a concurrent change.
    """

    def __init__(self, config: JudgingConfig, store: JudgingStore, events: EventSink) -> None:
        self.config = config
        self.store = store
        self.events = events

    # ==================== Lookups ====================

    async def load(self, session_id: str) -> GameSession:
        """Fetch a session or raise NotFoundError."""
        game_session = await self.store.sessions.get(session_id)
        if game_session is None:
            raise NotFoundError("Session", session_id)
        return game_session

    async def load_open(self, session_id: str, operation: str) -> GameSession:
        """Fetch a session that still accepts mutations."""
        game_session = await self.load(session_id)
        if game_session.is_ended:
            raise TerminalStateError(session_id, operation)
        return game_session

    async def load_for_host(
        self, session_id: str, host_token: str, operation: str
    ) -> GameSession:
        """Fetch a session, check host authority, then check it is not ended."""
        game_session = await self.load(session_id)
        if not host_token or not secrets.compare_digest(
            str(host_token).encode(), game_session.host_token.encode()
        ):
            raise AuthorizationError(session_id)
        if game_session.is_ended:
            raise TerminalStateError(session_id, operation)
        return game_session

    async def current_team(self, game_session: GameSession) -> Team:
        """Team record for the name at the current index."""
        name = game_session.current_team_name
        if name is None:
            raise NotFoundError("Team at index", game_session.current_team_index)
        team = await self.store.catalog.find_team(name)
        if team is None:
            raise NotFoundError("Team", name)
        return team

    # ==================== Transitions ====================

    async def create(self, team_names: Sequence[str]) -> SessionCreated:
        """Create a waiting session rotating through ``team_names``.

        Raises:
            ValidationError: If no non-blank team name is given.
        """
        names = [n.strip() for n in team_names or [] if isinstance(n, str) and n.strip()]
        if not names:
            raise ValidationError("team_names", "Please select at least one team.")

        session_id = str(uuid.uuid4())
        game_session = GameSession(
            id=session_id,
            name=f"Session {session_id}",
            host_token=str(uuid.uuid4()),
            team_names=names,
        )
        game_session = await self.store.sessions.create(game_session)
        logger.info("session_created", session_id=session_id, teams=len(names))

        await self.events.emit(session_id, EventType.SESSION_CREATED, {"teams": names})
        return SessionCreated(
            session_id=session_id, host_token=game_session.host_token, teams=names
        )

    async def start_questions(
        self, session_id: str, question_ids: Sequence[Any], host_token: str
    ) -> RoundStarted:
        """Attach a question set to the current team and activate the session.

        The team record for the current name is resolved with an idempotent
        get-or-create; a missing record is created and logged. All writes,
        the team record included, happen in one transaction.

        Raises:
            AuthorizationError: Host token mismatch.
            TerminalStateError: Session has ended.
            ValidationError: No question ids given.
            NotFoundError: No team name at the current index.
            ConcurrentUpdateError: Session changed while starting.
        """
        game_session = await self.load_for_host(session_id, host_token, "start questions")
        ids = _normalize_question_ids(question_ids or [])
        if not ids:
            raise ValidationError("question_ids", "Select at least one question to start.")

        team_name = game_session.current_team_name
        if team_name is None:
            raise NotFoundError("Team at index", game_session.current_team_index)

        started = await self.store.sessions.start_round(
            session_id, game_session.version, ids, team_name
        )
        if started is None:
            raise ConcurrentUpdateError(session_id, game_session.version)
        questions, team, created = started
        if created:
            logger.warning(
                "team_auto_created", session_id=session_id, team=team_name, team_id=team.id
            )

        payload = [q.summary() for q in questions]
        logger.info(
            "questions_started",
            session_id=session_id,
            team=team_name,
            questions=len(questions),
        )
        await self.events.emit(
            session_id,
            EventType.QUESTIONS_STARTED,
            {"questions": payload, "current_team": team_name, "team_id": team.id},
        )
        return RoundStarted(
            session_id=session_id,
            team_id=team.id,
            current_team=team_name,
            team_created=created,
            questions=payload,
        )

    async def change_team(self, session_id: str, direction: str, host_token: str) -> TeamChange:
        """Move to the next or previous team; clamped, never wraps.

        Raises:
            ValidationError: Unknown direction.
            AuthorizationError: Host token mismatch.
            TerminalStateError: Session has ended.
            ConcurrentUpdateError: Another transition won the race.
        """
        if direction not in ("next", "previous"):
            raise ValidationError("direction", "Use 'next' or 'previous'.")
        game_session = await self.load_for_host(session_id, host_token, "change team")

        new_index = next_team_index(
            game_session.current_team_index, len(game_session.team_names), direction
        )
        team_name = game_session.team_names[new_index] if game_session.team_names else None
        team = await self.store.catalog.find_team(team_name) if team_name else None
        team_id = team.id if team else None

        swapped = await self.store.sessions.update_if_version(
            session_id,
            game_session.version,
            current_team_index=new_index,
            current_team_id=team_id,
        )
        if not swapped:
            raise ConcurrentUpdateError(session_id, game_session.version)

        logger.info(
            "team_changed",
            session_id=session_id,
            direction=direction,
            index=new_index,
            moved=new_index != game_session.current_team_index,
        )
        await self.events.emit(
            session_id,
            EventType.TEAM_CHANGED,
            {"current_team": team_name, "current_team_index": new_index},
        )
        return TeamChange(
            current_team=team_name, current_team_index=new_index, current_team_id=team_id
        )

    async def end(self, session_id: str, host_token: str) -> SessionState:
        """End the session and mark its judges offline.

        Raises:
            AuthorizationError: Host token mismatch.
            TerminalStateError: Session already ended.
            ConcurrentUpdateError: Another transition won the race.
        """
        game_session = await self.load_for_host(session_id, host_token, "end session")
        offline = await self.store.sessions.end(session_id, game_session.version)
        if offline is None:
            raise ConcurrentUpdateError(session_id, game_session.version)

        logger.info("session_ended", session_id=session_id, judges_offline=offline)
        await self.events.emit(
            session_id,
            EventType.SESSION_ENDED,
            {"session_id": session_id, "ended_at": datetime.now(UTC).isoformat()},
        )
        return await self.get_state(session_id)

    # ==================== Reads ====================

    async def get_state(self, session_id: str) -> SessionState:
        game_session = await self.load(session_id)
        judges = await self.store.judges.list_online(session_id)
        return SessionState(
            session_id=game_session.id,
            status=str(game_session.status),
            current_team_index=game_session.current_team_index,
            current_team=game_session.current_team_name,
            current_team_id=game_session.current_team_id,
            teams=list(game_session.team_names),
            current_questions=list(game_session.current_questions or []),
            total_points=game_session.total_points,
            judges=[JudgeInfo(id=j.id, name=j.name, is_online=j.is_online) for j in judges],
            version=game_session.version,
        )

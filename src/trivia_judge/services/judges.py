"""Judge onboarding and presence."""

from __future__ import annotations

import secrets
import uuid

import structlog

from trivia_judge.core.config import JudgingConfig
from trivia_judge.core.errors import (
    AuthenticationError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)
from trivia_judge.models import EventType, GameSession, Judge
from trivia_judge.models.views import JudgeInfo, JudgeJoined
from trivia_judge.services.events import EventSink
from trivia_judge.services.storage import JudgingStore

logger = structlog.get_logger()


class JudgeService:
    """Joins judges to sessions with a rotating token."""

    def __init__(self, config: JudgingConfig, store: JudgingStore, events: EventSink) -> None:
        self.config = config
        self.store = store
        self.events = events

    async def authenticate(self, judge_token: str) -> Judge:
        """Resolve a judge by token or raise AuthenticationError."""
        judge = await self.store.judges.find_by_token(judge_token) if judge_token else None
        if judge is None:
            raise AuthenticationError(
                "Invalid judge token", "Join the session again to get a fresh token."
            )
        return judge

    async def join(self, pin: str, name: str, session_id: str | None = None) -> JudgeJoined:
        """Create or re-activate a judge and link it to a session.

        With ``session_id`` the judge joins that session, which must not have
        ended. Without it the newest waiting/active session is used, if any.

        Raises:
            ValidationError: Blank name.
            AuthenticationError: Wrong PIN.
            NotFoundError: Named session does not exist.
            TerminalStateError: Named session has ended.
        """
        if not name or not name.strip():
            raise ValidationError("name", "Name is required.")
        expected_pin = self.config.get_judge_pin()
        if pin is None or not secrets.compare_digest(str(pin).encode(), expected_pin.encode()):
            raise AuthenticationError("Invalid Game PIN", "Ask the host for the current PIN.")

        game_session: GameSession | None
        if session_id:
            game_session = await self.store.sessions.get(session_id)
            if game_session is None:
                raise NotFoundError("Session", session_id)
            if game_session.is_ended:
                raise TerminalStateError(session_id, "join")
        else:
            game_session = await self.store.sessions.find_open()

        linked_id = game_session.id if game_session else None
        judge = await self.store.judges.join(name.strip(), str(uuid.uuid4()), linked_id)
        logger.info("judge_joined", judge=judge.name, session_id=linked_id)

        if linked_id:
            await self.events.emit(
                linked_id,
                EventType.JUDGE_JOINED,
                {"judge_name": judge.name, "judge_id": judge.id},
            )
        return JudgeJoined(
            judge=JudgeInfo(id=judge.id, name=judge.name, is_online=judge.is_online),
            judge_token=judge.judge_token,
            session_id=linked_id,
        )

    async def list_online(self, session_id: str) -> list[JudgeInfo]:
        """Online judges of a session."""
        if await self.store.sessions.get(session_id) is None:
            raise NotFoundError("Session", session_id)
        judges = await self.store.judges.list_online(session_id)
        return [JudgeInfo(id=j.id, name=j.name, is_online=j.is_online) for j in judges]

"""Tests for the session state machine."""

import pytest

from trivia_judge.core.errors import (
    AuthorizationError,
    ConcurrentUpdateError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)
from trivia_judge.services.session import next_team_index


class TestNextTeamIndex:
    """Tests for clamped team rotation."""

    def test_moves_within_bounds(self):
        assert next_team_index(0, 3, "next") == 1
        assert next_team_index(2, 3, "previous") == 1

    def test_boundaries_unchanged(self):
        assert next_team_index(2, 3, "next") == 2
        assert next_team_index(0, 3, "previous") == 0

    def test_single_team(self):
        assert next_team_index(0, 1, "next") == 0
        assert next_team_index(0, 1, "previous") == 0


class TestCreateSession:
    """Tests for session creation."""

    async def test_create_waiting_session(self, engine):
        created = await engine.create_session(["A", " B "])
        assert created.teams == ["A", "B"]
        assert created.host_token

        state = await engine.get_state(created.session_id)
        assert state.status == "waiting"
        assert state.current_team_index == 0
        assert state.current_team == "A"
        assert state.version == 0

    async def test_no_teams_rejected(self, engine):
        with pytest.raises(ValidationError):
            await engine.create_session([])
        with pytest.raises(ValidationError):
            await engine.create_session(["", "   "])

    async def test_emits_session_created(self, engine):
        created = await engine.create_session(["A"])
        events = await engine.session_events(created.session_id)
        assert [e.event_type for e in events] == ["session_created"]
        assert events[0].event_data == {"teams": ["A"]}

    async def test_unknown_session(self, engine):
        with pytest.raises(NotFoundError):
            await engine.get_state("missing")


class TestStartQuestions:
    """Tests for starting a question round."""

    async def test_missing_team_auto_created(self, engine, questions):
        """Test a team absent from the Team table is created and returned."""
        created = await engine.create_session(["Owls", "Bears"])
        started = await engine.start_questions(
            created.session_id, [q.id for q in questions], created.host_token
        )
        assert started.team_created is True
        assert started.team_id
        assert started.current_team == "Owls"

        team = await engine.find_team("Owls")
        assert team["team_id"] == started.team_id

    async def test_existing_team_reused(self, engine, questions):
        await engine.store.catalog.ensure_team("Owls")
        created = await engine.create_session(["Owls"])
        started = await engine.start_questions(
            created.session_id, [questions[0].id], created.host_token
        )
        assert started.team_created is False

    async def test_activates_session(self, engine, questions):
        created = await engine.create_session(["Owls"])
        started = await engine.start_questions(
            created.session_id, [q.id for q in questions], created.host_token
        )
        state = await engine.get_state(created.session_id)
        assert state.status == "active"
        assert state.current_team_id == started.team_id
        assert [q["id"] for q in state.current_questions] == [q.id for q in questions]
        assert state.version == 1

    async def test_accepts_question_objects_and_ignores_unknown(self, engine, questions):
        created = await engine.create_session(["Owls"])
        started = await engine.start_questions(
            created.session_id,
            [{"id": questions[1].id}, "no-such-question"],
            created.host_token,
        )
        assert [q["id"] for q in started.questions] == [questions[1].id]

    async def test_empty_question_ids_rejected(self, engine):
        created = await engine.create_session(["Owls"])
        with pytest.raises(ValidationError):
            await engine.start_questions(created.session_id, [], created.host_token)

    async def test_wrong_host_token(self, engine, questions):
        created = await engine.create_session(["Owls"])
        with pytest.raises(AuthorizationError):
            await engine.start_questions(created.session_id, [questions[0].id], "nope")

    async def test_unknown_session(self, engine, questions):
        with pytest.raises(NotFoundError):
            await engine.start_questions("missing", [questions[0].id], "token")

    async def test_questions_linked_to_session(self, engine, questions):
        created = await engine.create_session(["Owls"])
        await engine.start_questions(
            created.session_id, [questions[0].id, questions[0].id], created.host_token
        )
        await engine.start_questions(created.session_id, [questions[0].id], created.host_token)
        linked = await engine.store.sessions.questions_for(created.session_id)
        assert [q.id for q in linked] == [questions[0].id]

    async def test_emits_questions_started(self, engine, questions):
        created = await engine.create_session(["Owls"])
        await engine.start_questions(created.session_id, [questions[0].id], created.host_token)
        events = await engine.session_events(created.session_id)
        assert events[-1].event_type == "questions_started"
        assert events[-1].event_data["current_team"] == "Owls"


class TestChangeTeam:
    """Tests for team rotation."""

    async def test_clamped_rotation(self, engine):
        created = await engine.create_session(["A", "B", "C"])
        sid, token = created.session_id, created.host_token

        assert (await engine.change_team(sid, "previous", token)).current_team_index == 0
        assert (await engine.change_team(sid, "next", token)).current_team_index == 1
        assert (await engine.change_team(sid, "next", token)).current_team_index == 2
        change = await engine.change_team(sid, "next", token)
        assert change.current_team_index == 2
        assert change.current_team == "C"
        assert (await engine.change_team(sid, "previous", token)).current_team_index == 1

        state = await engine.get_state(sid)
        assert state.current_team == "B"
        assert state.version == 5

    async def test_refreshes_current_team_id(self, engine):
        team, _ = await engine.store.catalog.ensure_team("B")
        created = await engine.create_session(["A", "B"])
        change = await engine.change_team(created.session_id, "next", created.host_token)
        assert change.current_team_id == team.id

        back = await engine.change_team(created.session_id, "previous", created.host_token)
        assert back.current_team_id is None

    async def test_invalid_direction(self, engine):
        created = await engine.create_session(["A", "B"])
        with pytest.raises(ValidationError):
            await engine.change_team(created.session_id, "sideways", created.host_token)

    async def test_wrong_host_token(self, engine):
        created = await engine.create_session(["A", "B"])
        with pytest.raises(AuthorizationError):
            await engine.change_team(created.session_id, "next", "not-the-token")

    async def test_lost_race_raises_conflict(self, engine, monkeypatch):
        created = await engine.create_session(["A", "B"])

        async def _lose(*_args, **_kwargs):
            return False

        monkeypatch.setattr(engine.store.sessions, "update_if_version", _lose)
        with pytest.raises(ConcurrentUpdateError):
            await engine.change_team(created.session_id, "next", created.host_token)


class TestCompareAndSwap:
    """Tests for versioned session writes."""

    async def test_stale_version_rejected(self, engine):
        created = await engine.create_session(["A", "B"])
        sessions = engine.store.sessions
        game_session = await sessions.get(created.session_id)

        assert await sessions.update_if_version(
            created.session_id, game_session.version, current_team_index=1
        )
        assert not await sessions.update_if_version(
            created.session_id, game_session.version, current_team_index=0
        )
        reloaded = await sessions.get(created.session_id)
        assert reloaded.current_team_index == 1
        assert reloaded.version == game_session.version + 1

    async def test_stale_round_start_writes_nothing(self, engine, questions):
        created = await engine.create_session(["A"])
        await engine.store.catalog.ensure_team("A")
        result = await engine.store.sessions.start_round(
            created.session_id, 99, [questions[0].id], "A"
        )
        assert result is None
        assert await engine.store.sessions.questions_for(created.session_id) == []
        state = await engine.get_state(created.session_id)
        assert state.status == "waiting"

    async def test_stale_round_start_creates_no_team(self, engine, questions):
        """Test a lost round start rolls back the team it would have created."""
        created = await engine.create_session(["Owls"])
        result = await engine.store.sessions.start_round(
            created.session_id, 99, [questions[0].id], "Owls"
        )
        assert result is None
        assert await engine.store.catalog.find_team("Owls") is None
        with pytest.raises(NotFoundError):
            await engine.find_team("Owls")


class TestEndSession:
    """Tests for ending a session."""

    async def test_end_marks_judges_offline(self, engine):
        created = await engine.create_session(["A"])
        await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)
        assert len(await engine.list_judges(created.session_id)) == 1

        state = await engine.end_session(created.session_id, created.host_token)
        assert state.status == "ended"
        assert state.judges == []
        assert await engine.list_judges(created.session_id) == []

    async def test_end_is_terminal(self, engine, questions):
        created = await engine.create_session(["A", "B"])
        sid, token = created.session_id, created.host_token
        await engine.end_session(sid, token)

        with pytest.raises(TerminalStateError):
            await engine.end_session(sid, token)
        with pytest.raises(TerminalStateError):
            await engine.change_team(sid, "next", token)
        with pytest.raises(TerminalStateError):
            await engine.start_questions(sid, [questions[0].id], token)

    async def test_authorization_checked_before_terminal_state(self, engine):
        created = await engine.create_session(["A"])
        await engine.end_session(created.session_id, created.host_token)
        with pytest.raises(AuthorizationError):
            await engine.end_session(created.session_id, "wrong")

    async def test_emits_session_ended(self, engine):
        created = await engine.create_session(["A"])
        await engine.end_session(created.session_id, created.host_token)
        events = await engine.session_events(created.session_id)
        assert events[-1].event_type == "session_ended"
        assert events[-1].event_data["session_id"] == created.session_id

"""Tests for judge onboarding."""

import pytest

from trivia_judge.core.errors import (
    AuthenticationError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)


class TestJoinJudge:
    """Tests for joining a session as a judge."""

    async def test_join_named_session(self, engine):
        created = await engine.create_session(["A"])
        joined = await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)
        assert joined.session_id == created.session_id
        assert joined.judge.name == "Alex"
        assert joined.judge.is_online is True
        assert joined.judge_token

        judges = await engine.list_judges(created.session_id)
        assert [j.name for j in judges] == ["Alex"]

    async def test_join_newest_open_session(self, engine):
        await engine.create_session(["A"])
        newest = await engine.create_session(["B"])
        joined = await engine.join_judge(engine.config.judge_pin, "Alex")
        assert joined.session_id == newest.session_id

    async def test_join_without_open_session(self, engine):
        joined = await engine.join_judge(engine.config.judge_pin, "Alex")
        assert joined.session_id is None

    async def test_rejoin_rotates_token(self, engine):
        created = await engine.create_session(["A"])
        first = await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)
        second = await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)
        assert first.judge.id == second.judge.id
        assert first.judge_token != second.judge_token
        assert await engine.store.judges.find_by_token(first.judge_token) is None

    async def test_blank_name(self, engine):
        with pytest.raises(ValidationError):
            await engine.join_judge(engine.config.judge_pin, "   ")

    async def test_wrong_pin(self, engine):
        with pytest.raises(AuthenticationError, match="Invalid Game PIN"):
            await engine.join_judge("0000", "Alex")

    async def test_unknown_session(self, engine):
        with pytest.raises(NotFoundError):
            await engine.join_judge(engine.config.judge_pin, "Alex", "missing")

    async def test_ended_session(self, engine):
        created = await engine.create_session(["A"])
        await engine.end_session(created.session_id, created.host_token)
        with pytest.raises(TerminalStateError):
            await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)

    async def test_emits_judge_joined(self, engine):
        created = await engine.create_session(["A"])
        joined = await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)
        events = await engine.session_events(created.session_id)
        assert events[-1].event_type == "judge_joined"
        assert events[-1].event_data == {"judge_name": "Alex", "judge_id": joined.judge.id}

    async def test_list_judges_unknown_session(self, engine):
        with pytest.raises(NotFoundError):
            await engine.list_judges("missing")

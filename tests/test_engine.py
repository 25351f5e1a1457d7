"""End-to-end tests for the engine facade."""

import tempfile
from pathlib import Path

import pytest

from trivia_judge import JudgingEngine
from trivia_judge.core.config import JudgingConfig
from trivia_judge.core.errors import NotFoundError


class TestSnapshot:
    """Tests for the denormalized session view."""

    async def test_snapshot(self, engine, questions):
        created = await engine.create_session(["A", "B"])
        started = await engine.start_questions(
            created.session_id, [q.id for q in questions], created.host_token
        )
        joined = await engine.join_judge(engine.config.judge_pin, "Alex", created.session_id)
        await engine.submit_answer(created.session_id, joined.judge_token, "Yes", questions[0].id)
        await engine.submit_final_answers(
            created.session_id,
            joined.judge_token,
            started.team_id,
            [
                {"question_id": questions[0].id, "answer": "Yes"},
                {"question_id": questions[1].id, "answer": "Partial"},
            ],
        )

        snapshot = await engine.get_snapshot(created.session_id)
        assert snapshot.status == "active"
        assert snapshot.current_team == "A"
        assert [j.name for j in snapshot.judges] == ["Alex"]

        lines = snapshot.answers_by_team["A"]
        assert lines[0].player == "Alex"
        assert lines[0].answer == "Yes"
        assert lines[0].points == 2.0
        assert lines[0].question == questions[0].text
        assert lines[1].answer == "2 answers"
        assert lines[1].points == 3.5
        assert lines[1].question is None

        assert [(r.team_name, r.total_points) for r in snapshot.leaderboard] == [
            ("A", 3.5),
            ("B", 0.0),
        ]

    async def test_snapshot_of_fresh_session(self, engine):
        created = await engine.create_session(["A"])
        snapshot = await engine.get_snapshot(created.session_id)
        assert snapshot.answers_by_team == {}
        assert [r.team_name for r in snapshot.leaderboard] == ["A"]

    async def test_snapshot_serializes(self, engine):
        created = await engine.create_session(["A"])
        data = (await engine.get_snapshot(created.session_id)).model_dump(mode="json")
        assert data["session_id"] == created.session_id
        assert data["leaderboard"][0]["rank"] == 1


class TestSessionEvents:
    """Tests for replaying the event log through the engine."""

    async def test_full_round_event_log(self, engine, questions):
        created = await engine.create_session(["A", "B"])
        sid, token = created.session_id, created.host_token
        joined = await engine.join_judge(engine.config.judge_pin, "Alex", sid)
        started = await engine.start_questions(sid, [questions[0].id], token)
        await engine.submit_final_answers(
            sid, joined.judge_token, started.team_id, [{"question_id": questions[0].id}]
        )
        await engine.change_team(sid, "next", token)
        await engine.end_session(sid, token)

        events = await engine.session_events(sid)
        assert [e.event_type for e in events] == [
            "session_created",
            "judge_joined",
            "questions_started",
            "leaderboard_updated",
            "final_answers_submitted",
            "team_changed",
            "session_ended",
        ]
        assert [e.sequence for e in events] == list(range(1, 8))

        tail = await engine.session_events(sid, after=5)
        assert [e.event_type for e in tail] == ["team_changed", "session_ended"]

    async def test_unknown_session(self, engine):
        with pytest.raises(NotFoundError):
            await engine.session_events("missing")


class TestDuckDBStore:
    """Smoke test against the default DuckDB backend."""

    async def test_default_backend_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = JudgingConfig(data_dir=str(Path(tmpdir) / "data"), judge_pin="1111")
            async with JudgingEngine(config) as engine:
                assert engine.store.database_url.startswith("duckdb:///")
                created = await engine.create_session(["A", "B"])
                state = await engine.get_state(created.session_id)
                assert state.teams == ["A", "B"]
                assert state.status == "waiting"
            assert (Path(tmpdir) / "data" / "judging.duckdb").exists()

"""Tests for error formatting."""

from trivia_judge.core.errors import (
    AuthenticationError,
    ConcurrentUpdateError,
    JudgingError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)


class TestJudgingErrors:
    """Tests for message formatting and structured output."""

    def test_message_with_suggestion(self):
        error = ValidationError("name", "Name is required.")
        assert str(error) == (
            "[Validation Error] Invalid value for 'name'\n[Suggestion] Name is required."
        )
        assert error.field == "name"

    def test_message_without_suggestion(self):
        error = NotFoundError("Team", "Owls")
        assert str(error) == "[Not Found] Team not found: Owls"
        assert error.suggestion is None

    def test_to_dict(self):
        error = TerminalStateError("s1", "submit answers")
        data = error.to_dict()
        assert data["kind"] == "terminal_state"
        assert data["message"] == "Session 's1' has ended; cannot submit answers"
        assert "suggestion" in data

    def test_kinds_are_distinct(self):
        errors = [
            ValidationError("f", "r"),
            AuthenticationError("bad"),
            NotFoundError("Session", "x"),
            TerminalStateError("s", "op"),
            ConcurrentUpdateError("s", 3),
        ]
        kinds = [e.kind for e in errors]
        assert len(set(kinds)) == len(kinds)
        assert all(isinstance(e, JudgingError) for e in errors)

    def test_conflict_mentions_version(self):
        assert "expected version 3" in ConcurrentUpdateError("s", 3).message

"""Custom exceptions surfaced by the judging engine."""

from __future__ import annotations

from typing import Any


class JudgingError(Exception):
    """Base exception for engine failures with optional suggestions.

    Every subclass carries a stable ``kind`` so callers (HTTP adapters, the CLI)
    can surface a structured ``{"kind", "message"}`` failure.
    """

    kind = "error"
    label = "Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.label}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg

    def to_dict(self) -> dict[str, Any]:
        """Structured form for transport layers."""
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


class ConfigurationError(JudgingError):
    """Error in the engine configuration file."""

    kind = "configuration"
    label = "Configuration Error"


class ValidationError(JudgingError):
    """Missing or empty required input."""

    kind = "validation"
    label = "Validation Error"

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        super().__init__(f"Invalid value for '{field}'", reason)


class AuthenticationError(JudgingError):
    """Unknown judge token or wrong join PIN."""

    kind = "authentication"
    label = "Authentication Error"


class AuthorizationError(JudgingError):
    """Host token does not match the session."""

    kind = "authorization"
    label = "Authorization Error"

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Invalid session or host token for session '{session_id}'",
            "Use the host token returned when the session was created.",
        )


class NotFoundError(JudgingError):
    """Unknown session, team or question."""

    kind = "not_found"
    label = "Not Found"

    def __init__(self, entity: str, key: Any) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class TerminalStateError(JudgingError):
    """Mutation attempted on an ended session."""

    kind = "terminal_state"
    label = "Terminal State"

    def __init__(self, session_id: str, operation: str) -> None:
        super().__init__(
            f"Session '{session_id}' has ended; cannot {operation}",
            "Create a new session to continue judging.",
        )


class ConcurrentUpdateError(JudgingError):
    """Session changed between read and write (lost compare-and-swap)."""

    kind = "conflict"
    label = "Conflict"

    def __init__(self, session_id: str, expected_version: int) -> None:
        super().__init__(
            f"Session '{session_id}' was modified concurrently "
            f"(expected version {expected_version})",
            "Fetch the current state and retry the request.",
        )


class ComputationError(JudgingError):
    """Question that no answer could ever score on.

    Scoring itself clamps degenerate input to zero; this is raised only by
    strict question validation.
    """

    kind = "computation"
    label = "Computation Error"

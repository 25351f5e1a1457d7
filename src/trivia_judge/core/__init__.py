"""Core configuration and errors for the judging engine."""

from trivia_judge.core.config import (
    DEFAULT_JUDGE_PIN,
    JudgingConfig,
    SeedBank,
    SeedChoice,
    SeedData,
    SeedQuestion,
    SeedTeam,
    load_config,
    load_seed,
)
from trivia_judge.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ComputationError,
    ConcurrentUpdateError,
    ConfigurationError,
    JudgingError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)

__all__ = [
    "DEFAULT_JUDGE_PIN",
    "JudgingConfig",
    "SeedBank",
    "SeedChoice",
    "SeedData",
    "SeedQuestion",
    "SeedTeam",
    "load_config",
    "load_seed",
    "AuthenticationError",
    "AuthorizationError",
    "ComputationError",
    "ConcurrentUpdateError",
    "ConfigurationError",
    "JudgingError",
    "NotFoundError",
    "TerminalStateError",
    "ValidationError",
]

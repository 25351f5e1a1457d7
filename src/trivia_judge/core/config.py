"""Configuration schemas and loading for the judging engine."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from trivia_judge.core.errors import ConfigurationError

DEFAULT_JUDGE_PIN = "1234"
DEFAULT_DB_FILENAME = "judging.duckdb"


class JudgingConfig(BaseModel):
    """Complete engine configuration.

    Attributes:
        data_dir: Directory for the default database file and exports.
        database_url: SQLAlchemy URL. If None, a DuckDB file under data_dir.
        judge_pin: Shared PIN judges enter to join. Falls back to the
            JUDGE_PIN environment variable, then to DEFAULT_JUDGE_PIN.
        event_queue_size: Per-subscriber buffer for live events.
        result_precision: Decimal places kept for team totals.
        default_question_weight: Weight used when a question omits one.
        uncategorized_label: Category shown for teams without one.
    """

    data_dir: str = "./data"
    database_url: str | None = None
    judge_pin: str | None = None
    event_queue_size: int = Field(default=100, ge=1)
    result_precision: int = Field(default=2, ge=0, le=6)
    default_question_weight: float = Field(default=1.0, gt=0)
    uncategorized_label: str = "Uncategorized"

    @field_validator("judge_pin")
    @classmethod
    def validate_pin(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            msg = "judge_pin cannot be blank"
            raise ValueError(msg)
        return v

    def get_database_url(self) -> str:
        """Resolve the database URL, creating the data directory if needed."""
        if self.database_url:
            return self.database_url
        data_dir = Path(self.data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        return f"duckdb:///{data_dir / DEFAULT_DB_FILENAME}"

    def get_judge_pin(self) -> str:
        """Get judge PIN from config or environment."""
        return self.judge_pin or os.environ.get("JUDGE_PIN") or DEFAULT_JUDGE_PIN


class SeedChoice(BaseModel):
    """One weighted choice in a seed question."""

    text: str = Field(..., min_length=1)
    weight: float = 0.0
    correct: bool = False


class SeedQuestion(BaseModel):
    """A question as written in a seed or save payload."""

    text: str = Field(..., min_length=1)
    section: str | None = None
    weight: float | None = None
    choices: list[SeedChoice] = Field(default_factory=list)
    correct: str | None = None

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v.strip():
            msg = "Question text cannot be empty"
            raise ValueError(msg)
        return v


class SeedBank(BaseModel):
    """A named question bank with its questions."""

    name: str = Field(..., min_length=1)
    questions: list[SeedQuestion] = Field(default_factory=list)


class SeedTeam(BaseModel):
    """A team entry; plain strings in YAML are accepted too."""

    name: str = Field(..., min_length=1)
    category: str | None = None


class SeedData(BaseModel):
    """Contents of a seed file: teams and question banks."""

    teams: list[SeedTeam] = Field(default_factory=list)
    banks: list[SeedBank] = Field(default_factory=list)

    @field_validator("teams", mode="before")
    @classmethod
    def coerce_team_names(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [{"name": item} if isinstance(item, str) else item for item in v]
        return v


def _read_yaml(path: str | Path, label: str) -> Any:
    file_path = Path(path)
    if not file_path.exists():
        msg = f"{label} file not found: {file_path}"
        raise FileNotFoundError(msg)

    with file_path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"{label} file is not valid YAML: {file_path}") from e

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(
            f"{label} file must contain a mapping: {file_path}",
            "Use top-level keys, e.g. `teams:` and `banks:`.",
        )
    return data


def load_config(path: str | Path) -> JudgingConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated JudgingConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file is not a YAML mapping.
        ValidationError: If config values are invalid.
    """
    data = _read_yaml(path, "Configuration")
    return JudgingConfig.model_validate(data or {})


def load_seed(path: str | Path) -> SeedData:
    """Load teams and question banks from a YAML seed file."""
    data = _read_yaml(path, "Seed")
    return SeedData.model_validate(data or {})

"""Team and question catalog: host setup data, question banks, seeding."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pydantic
import structlog

from trivia_judge.core.config import JudgingConfig, SeedData, SeedQuestion
from trivia_judge.core.errors import NotFoundError, ValidationError
from trivia_judge.models import Question, QuestionBank, Team
from trivia_judge.models.views import HostInit
from trivia_judge.scoring import ensure_scorable
from trivia_judge.services.storage import JudgingStore

logger = structlog.get_logger()


class CatalogService:
    """Handles teams, question banks and seed data."""

    def __init__(self, config: JudgingConfig, store: JudgingStore) -> None:
        self.config = config
        self.store = store

    async def find_team(self, name: str) -> Team:
        team = await self.store.catalog.find_team(name)
        if team is None:
            raise NotFoundError("Team", name)
        return team

    async def host_init(self) -> HostInit:
        """Teams, categories, questions, banks and sections for the host screen."""
        teams = await self.store.catalog.list_teams()
        questions = await self.store.catalog.list_questions()
        banks = await self.store.catalog.list_banks()

        team_categories: dict[str, list[str]] = {}
        for team in teams:
            category = team.team_category or self.config.uncategorized_label
            team_categories.setdefault(category, []).append(team.name)

        # Questions are listed once per distinct text.
        distinct: dict[str, Question] = {}
        for question in questions:
            distinct.setdefault(question.text, question)

        by_bank: dict[str, list[dict[str, Any]]] = {}
        for question in questions:
            if question.bank_id:
                by_bank.setdefault(question.bank_id, []).append(question.summary())

        sections: list[str] = []
        for question in distinct.values():
            if question.section and question.section not in sections:
                sections.append(question.section)

        return HostInit(
            teams=[t.name for t in teams],
            team_categories=team_categories,
            questions=[q.summary() for q in distinct.values()],
            question_banks=[
                {"id": b.id, "name": b.name, "questions": by_bank.get(b.id, [])} for b in banks
            ],
            sections=sections,
        )

    def _build_question(self, raw: SeedQuestion | dict[str, Any], strict: bool) -> Question:
        try:
            entry = raw if isinstance(raw, SeedQuestion) else SeedQuestion.model_validate(raw)
        except pydantic.ValidationError as e:
            raise ValidationError("questions", str(e)) from e

        if strict:
            ensure_scorable(entry.text, entry.choices)

        correct = entry.correct or next((c.text for c in entry.choices if c.correct), None)
        return Question(
            text=entry.text,
            section=entry.section,
            weight=entry.weight if entry.weight is not None else self.config.default_question_weight,
            choices=[c.model_dump() for c in entry.choices],
            correct=correct,
        )

    async def save_questions(
        self,
        bank_name: str,
        questions: Sequence[SeedQuestion | dict[str, Any]],
        strict: bool = False,
    ) -> tuple[QuestionBank, list[Question]]:
        """Create questions in a bank (created by name if missing), atomically.

        Args:
            bank_name: Question bank name.
            questions: Question payloads.
            strict: Reject questions no answer could ever score on.

        Raises:
            ValidationError: Blank bank name or malformed question.
            ComputationError: In strict mode, for unscorable questions.
        """
        if not bank_name or not bank_name.strip():
            raise ValidationError("bank_name", "A question bank name is required.")
        built = [self._build_question(q, strict) for q in questions]
        bank, saved = await self.store.catalog.save_bank(bank_name.strip(), built)
        logger.info("questions_saved", bank=bank.name, count=len(saved))
        return bank, saved

    async def seed(self, data: SeedData, strict: bool = False) -> dict[str, int]:
        """Load seed teams and banks.

        Teams are upserted by name. A bank that already exists is skipped
        so re-running a seed never duplicates questions.

        Returns:
            Counts of created teams, created banks, created questions.
        """
        counts = {"teams": 0, "banks": 0, "questions": 0}
        for seed_team in data.teams:
            _, created = await self.store.catalog.ensure_team(seed_team.name, seed_team.category)
            counts["teams"] += int(created)

        for seed_bank in data.banks:
            if await self.store.catalog.find_bank(seed_bank.name) is not None:
                logger.info("seed_bank_exists", bank=seed_bank.name)
                continue
            _, saved = await self.save_questions(seed_bank.name, seed_bank.questions, strict)
            counts["banks"] += 1
            counts["questions"] += len(saved)

        logger.info("seed_complete", **counts)
        return counts

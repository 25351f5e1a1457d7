#!/usr/bin/env python
"""Play a short scripted trivia session end to end and print the leaderboard."""

import asyncio
import os

from dotenv import load_dotenv

from trivia_judge import JudgingEngine
from trivia_judge.core.config import JudgingConfig, SeedData
from trivia_judge.services.reporting import render_leaderboard

load_dotenv()

TEAMS = ["Quizzly Bears", "Trivia Newton John", "The Know-It-Owls"]

SEED = {
    "teams": [
        {"name": "Quizzly Bears", "category": "Regulars"},
        {"name": "Trivia Newton John", "category": "Regulars"},
        {"name": "The Know-It-Owls", "category": "Guests"},
    ],
    "banks": [
        {
            "name": "Warm-up",
            "questions": [
                {
                    "text": "Did the team answer with the capital of Australia?",
                    "section": "Geography",
                    "weight": 2,
                    "choices": [
                        {"text": "Canberra", "weight": 1, "correct": True},
                        {"text": "Sydney", "weight": 0},
                    ],
                },
                {
                    "text": "How well did the team explain photosynthesis?",
                    "section": "Science",
                    "weight": 3,
                    "choices": [
                        {"text": "Complete", "weight": 4},
                        {"text": "Partial", "weight": 2},
                        {"text": "Wrong", "weight": 0},
                    ],
                },
            ],
        }
    ],
}

# Judge name -> answers per team, in question order
VERDICTS = {
    "Alex": {
        "Quizzly Bears": ["Canberra", "Partial"],
        "Trivia Newton John": ["Sydney", "Complete"],
        "The Know-It-Owls": ["Canberra", "Complete"],
    },
    "Sam": {
        "Quizzly Bears": ["Canberra", "Complete"],
        "Trivia Newton John": ["Canberra", "Wrong"],
        "The Know-It-Owls": ["Sydney", "Partial"],
    },
}


async def main() -> None:
    """Seed, play one round per team, end the session, print results."""
    config = JudgingConfig(
        data_dir=os.environ.get("TRIVIA_DATA_DIR", "./data/demo"),
        judge_pin=os.environ.get("JUDGE_PIN", "1234"),
    )

    async with JudgingEngine(config) as engine:
        await engine.seed(SeedData.model_validate(SEED), strict=True)
        host_init = await engine.host_init()
        question_ids = [q["id"] for q in host_init.questions]

        created = await engine.create_session(TEAMS)
        session_id, host_token = created.session_id, created.host_token

        tokens = {}
        for judge_name in VERDICTS:
            joined = await engine.join_judge(config.get_judge_pin(), judge_name, session_id)
            tokens[judge_name] = joined.judge_token

        for index, team_name in enumerate(TEAMS):
            if index:
                await engine.change_team(session_id, "next", host_token)
            started = await engine.start_questions(session_id, question_ids, host_token)
            for judge_name, per_team in VERDICTS.items():
                answers = [
                    {"question_id": qid, "answer": text}
                    for qid, text in zip(question_ids, per_team[team_name], strict=True)
                ]
                await engine.submit_final_answers(
                    session_id, tokens[judge_name], started.team_id, answers
                )

        await engine.end_session(session_id, host_token)
        rows = await engine.get_leaderboard(session_id)
        print(render_leaderboard(rows, "Demo Session", precision=config.result_precision))


if __name__ == "__main__":
    asyncio.run(main())

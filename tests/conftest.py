"""
Shared fixtures for the quiz engine tests.

Durable-store tests run against an in-memory SQLite database (aiosqlite
with a StaticPool so every session sees the same connection). Caches are
the in-memory backends and time comes from a controllable clock.
"""

import datetime
import random
from typing import Iterable, List, Optional

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from brainbolt.common.cache import MemoryCacheBackend, MemoryRankedCache
from brainbolt.common.hashing import hash_answer
from brainbolt.database.init_db import Database
from brainbolt.database.models import QuestionRecord
from brainbolt.domain.questions import MemoryQuestionCatalog, Question, QuestionRepository
from brainbolt.leaderboard.service import LeaderboardService
from brainbolt.quiz.adaptive import DifficultyBounds
from brainbolt.quiz.answer_log import AnswerLogStore
from brainbolt.quiz.orchestrator import QuizOrchestrator
from brainbolt.quiz.session_store import SessionStateStore

BOUNDS = DifficultyBounds(1, 10)


class FakeClock:
    """Clock returning a fixed naive-UTC time until advanced."""

    def __init__(self, start: Optional[datetime.datetime] = None):
        self.now = start or datetime.datetime(2026, 1, 15, 12, 0, 0)

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)


def make_question(question_id: str, difficulty: int, answer: str = "right") -> Question:
    """Question whose correct answer is ``answer``."""
    return Question.create(
        id=question_id,
        difficulty=difficulty,
        prompt=f"Prompt for {question_id}",
        choices=[answer, "wrong-1", "wrong-2"],
        correct_answer_hash=hash_answer(answer),
    )


def make_catalog(per_level: int = 3, levels: Iterable[int] = range(1, 11), seed: int = 7) -> MemoryQuestionCatalog:
    """Catalog with ``per_level`` questions (answer "right") at every level."""
    questions: List[Question] = [
        make_question(f"q-{level}-{index}", level)
        for level in levels
        for index in range(per_level)
    ]
    return MemoryQuestionCatalog(questions, rng=random.Random(seed))


async def seed_questions(database: Database, questions: Iterable[Question]) -> None:
    async with database.transaction() as db:
        for question in questions:
            db.add(QuestionRecord(
                id=question.id,
                difficulty=question.difficulty,
                prompt=question.prompt,
                choices=list(question.choices),
                correct_answer_hash=question.correct_answer_hash,
            ))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def database():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(engine)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def cache():
    return MemoryCacheBackend()


@pytest.fixture
def ranked_cache():
    return MemoryRankedCache()


@pytest.fixture
def catalog():
    return make_catalog()


@pytest.fixture
def session_store(database, cache, clock):
    return SessionStateStore(database, cache, session_ttl_seconds=1800, default_difficulty=3, clock=clock)


@pytest.fixture
def answer_log(database):
    return AnswerLogStore(database)


@pytest.fixture
def leaderboard(database, ranked_cache, clock):
    return LeaderboardService(database, ranked_cache, clock=clock)


@pytest.fixture
def orchestrator(database, session_store, answer_log, leaderboard, catalog, clock):
    questions = QuestionRepository(catalog, answer_log)
    return QuizOrchestrator(
        database,
        session_store,
        questions,
        answer_log,
        leaderboard,
        BOUNDS,
        clock=clock,
    )

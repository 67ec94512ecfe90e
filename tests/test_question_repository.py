"""
Tests for question selection: fallback order, recency exclusion and the
SQL and in-memory catalogs.
"""

import random
import unittest

import pytest

from brainbolt.common.exceptions import NoQuestionsAvailable
from brainbolt.domain.questions import (
    MemoryQuestionCatalog,
    QuestionRepository,
    SqlQuestionCatalog,
    fallback_order
)
from brainbolt.quiz.adaptive import DifficultyBounds
from conftest import BOUNDS, make_question, seed_questions


class StubHistory:
    """Answer history returning a fixed list of recent question ids."""

    def __init__(self, recent=None):
        self.recent = list(recent or [])
        self.calls = []

    async def recent_question_ids(self, user_id, session_id, limit):
        self.calls.append(limit)
        return self.recent[:limit]


class TestFallbackOrder(unittest.TestCase):
    """Test the candidate difficulty ordering."""

    def test_alternates_outward(self):
        self.assertEqual(fallback_order(5, BOUNDS), [5, 4, 6, 3, 7, 2, 8, 1, 9, 10])

    def test_respects_lower_bound(self):
        self.assertEqual(fallback_order(1, DifficultyBounds(1, 4)), [1, 2, 3, 4])

    def test_respects_upper_bound(self):
        self.assertEqual(fallback_order(4, DifficultyBounds(1, 4)), [4, 3, 2, 1])

    def test_single_level(self):
        self.assertEqual(fallback_order(3, DifficultyBounds(3, 3)), [3])


class TestQuestionRepository:
    """Test exclusion-aware picking on the in-memory catalog."""

    async def test_pick_excludes_recent(self):
        catalog = MemoryQuestionCatalog([make_question("a", 3), make_question("b", 3)], rng=random.Random(1))
        repository = QuestionRepository(catalog, StubHistory(["a"]))

        for _ in range(10):
            question = await repository.pick("u", "s", 3)
            assert question.id == "b"

    async def test_pick_returns_none_when_all_excluded(self):
        catalog = MemoryQuestionCatalog([make_question("a", 3)])
        repository = QuestionRepository(catalog, StubHistory(["a"]))

        assert await repository.pick("u", "s", 3) is None

    async def test_uses_exclusion_window(self):
        history = StubHistory()
        repository = QuestionRepository(MemoryQuestionCatalog([make_question("a", 3)]), history)

        await repository.pick("u", "s", 3)

        assert history.calls == [20]

    async def test_fallback_prefers_lower_neighbour(self):
        """With the requested level exhausted, d-1 is tried before d+1."""
        catalog = MemoryQuestionCatalog([
            make_question("at-5", 5), make_question("at-4", 4), make_question("at-6", 6)
        ])
        repository = QuestionRepository(catalog, StubHistory(["at-5"]))

        question = await repository.pick_with_fallback("u", "s", 5, BOUNDS)

        assert question.id == "at-4"

    async def test_fallback_repeats_when_everything_is_recent(self):
        """When every level is exhausted, a recent question at the requested level is repeated."""
        catalog = MemoryQuestionCatalog([make_question("only", 5), make_question("other", 6)])
        repository = QuestionRepository(catalog, StubHistory(["only", "other"]))

        question = await repository.pick_with_fallback("u", "s", 5, BOUNDS)

        assert question.id == "only"

    async def test_fallback_raises_when_catalog_is_empty(self):
        repository = QuestionRepository(MemoryQuestionCatalog(), StubHistory())

        with pytest.raises(NoQuestionsAvailable) as exc_info:
            await repository.pick_with_fallback("u", "s", 3, BOUNDS)
        assert exc_info.value.difficulty == 3

    async def test_get_by_id(self):
        repository = QuestionRepository(MemoryQuestionCatalog([make_question("a", 3)]), StubHistory())

        assert (await repository.get_by_id("a")).difficulty == 3
        assert await repository.get_by_id("missing") is None


class TestSqlQuestionCatalog:
    """Test the SQL catalog against SQLite."""

    async def test_find_by_id(self, database):
        await seed_questions(database, [make_question("q-1", 2)])
        catalog = SqlQuestionCatalog(database)

        question = await catalog.find_by_id("q-1")

        assert question.difficulty == 2
        assert question.choices == ("right", "wrong-1", "wrong-2")
        assert await catalog.find_by_id("nope") is None

    async def test_find_by_difficulty_excluding(self, database):
        await seed_questions(database, [make_question("q-1", 2), make_question("q-2", 2), make_question("q-3", 3)])
        catalog = SqlQuestionCatalog(database)

        for _ in range(5):
            question = await catalog.find_by_difficulty_excluding(2, ["q-1"])
            assert question.id == "q-2"
        assert await catalog.find_by_difficulty_excluding(2, ["q-1", "q-2"]) is None

    async def test_find_any_by_difficulty(self, database):
        await seed_questions(database, [make_question("q-1", 4)])
        catalog = SqlQuestionCatalog(database)

        assert (await catalog.find_any_by_difficulty(4)).id == "q-1"
        assert await catalog.find_any_by_difficulty(9) is None

"""
Memory Question Catalog Module

In-memory implementation of the QuestionCatalog for development and tests.
Random picks come from an injectable ``random.Random`` so draws can be
made reproducible.
"""

import random
from typing import Dict, Iterable, List, Optional, Sequence

from .catalog import QuestionCatalog
from .model import Question


class MemoryQuestionCatalog(QuestionCatalog):
    """In-memory catalog keyed by question id."""

    def __init__(self, initial_data: Optional[Iterable[Question]] = None, rng: Optional[random.Random] = None):
        """
        Initialize the catalog.

        Args:
            initial_data: Optional questions to load
            rng: Random source for picks (defaults to a fresh ``random.Random``)
        """
        self._questions: Dict[str, Question] = {}
        self._rng = rng or random.Random()
        for question in initial_data or ():
            self._questions[question.id] = question

    def add(self, question: Question) -> None:
        self._questions[question.id] = question

    def remove(self, question_id: str) -> bool:
        return self._questions.pop(question_id, None) is not None

    def get_all(self) -> List[Question]:
        return list(self._questions.values())

    async def find_by_id(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    async def find_by_difficulty_excluding(
        self,
        difficulty: int,
        excluded_ids: Sequence[str]
    ) -> Optional[Question]:
        excluded = set(excluded_ids)
        return self._choose([
            q for q in self._questions.values()
            if q.difficulty == difficulty and q.id not in excluded
        ])

    async def find_any_by_difficulty(self, difficulty: int) -> Optional[Question]:
        return self._choose([q for q in self._questions.values() if q.difficulty == difficulty])

    def _choose(self, candidates: List[Question]) -> Optional[Question]:
        if not candidates:
            return None
        # Sort so a seeded rng gives the same pick regardless of insertion order
        candidates.sort(key=lambda q: q.id)
        return self._rng.choice(candidates)

"""
Question Catalog Module

The catalog is the read-only collaborator the engine draws questions from.
This module defines its contract and the SQL implementation over the
``questions`` table.
"""

import abc
from typing import Optional, Sequence

from sqlalchemy import func, select

from brainbolt.common.logger import app_logger
from brainbolt.database.init_db import Database
from brainbolt.database.models import QuestionRecord
from .model import Question

logger = app_logger.getChild("questions.catalog")


class QuestionCatalog(abc.ABC):
    """
    Abstract read-only question catalog.

    Random picks return a single question or ``None`` when nothing matches.
    """

    @abc.abstractmethod
    async def find_by_id(self, question_id: str) -> Optional[Question]:
        """
        Get a question by its ID.

        Args:
            question_id: The ID of the question to retrieve

        Returns:
            The Question if found, None otherwise
        """

    @abc.abstractmethod
    async def find_by_difficulty_excluding(
        self,
        difficulty: int,
        excluded_ids: Sequence[str]
    ) -> Optional[Question]:
        """
        Pick a random question at exactly ``difficulty`` whose id is not excluded.

        Args:
            difficulty: Difficulty to draw from
            excluded_ids: Question ids that must not be returned

        Returns:
            A matching Question, or None
        """

    @abc.abstractmethod
    async def find_any_by_difficulty(self, difficulty: int) -> Optional[Question]:
        """Pick a random question at exactly ``difficulty``, ignoring exclusions."""


def _to_domain(row: QuestionRecord) -> Question:
    return Question.create(
        id=row.id,
        difficulty=row.difficulty,
        prompt=row.prompt,
        choices=row.choices or [],
        correct_answer_hash=row.correct_answer_hash
    )


class SqlQuestionCatalog(QuestionCatalog):
    """Catalog backed by the ``questions`` table."""

    def __init__(self, database: Database):
        self.database = database

    async def find_by_id(self, question_id: str) -> Optional[Question]:
        if not question_id:
            return None
        async with self.database.session() as session:
            row = await session.get(QuestionRecord, question_id)
            return _to_domain(row) if row is not None else None

    async def find_by_difficulty_excluding(
        self,
        difficulty: int,
        excluded_ids: Sequence[str]
    ) -> Optional[Question]:
        stmt = select(QuestionRecord).where(QuestionRecord.difficulty == difficulty)
        if excluded_ids:
            stmt = stmt.where(QuestionRecord.id.notin_(list(excluded_ids)))
        return await self._pick_random(stmt)

    async def find_any_by_difficulty(self, difficulty: int) -> Optional[Question]:
        return await self._pick_random(
            select(QuestionRecord).where(QuestionRecord.difficulty == difficulty)
        )

    async def _pick_random(self, stmt) -> Optional[Question]:
        async with self.database.session() as session:
            result = await session.execute(stmt.order_by(func.random()).limit(1))
            row = result.scalars().first()
            return _to_domain(row) if row is not None else None

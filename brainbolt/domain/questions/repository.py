"""
Question Repository Module

Exclusion-aware random selection on top of a QuestionCatalog. A session
is not served any of its ``RECENT_EXCLUSION_WINDOW`` most recently answered
questions unless the catalog leaves no other choice.
"""

from typing import List, Optional, Protocol, Sequence

from brainbolt.common.exceptions import NoQuestionsAvailable
from brainbolt.common.logger import app_logger
from brainbolt.quiz.adaptive import DifficultyBounds
from .catalog import QuestionCatalog
from .model import Question

logger = app_logger.getChild("questions.repository")

RECENT_EXCLUSION_WINDOW = 20


class AnswerHistory(Protocol):
    """Source of the questions a session has answered, newest first."""

    async def recent_question_ids(self, user_id: str, session_id: str, limit: int) -> List[str]:
        ...


def fallback_order(difficulty: int, bounds: DifficultyBounds) -> List[int]:
    """
    Difficulties to try, in order: the requested one, then outward by
    increasing offset alternating below and above (d, d-1, d+1, d-2, d+2, ...),
    skipping anything outside ``bounds``.

    A requested difficulty outside the bounds is still tried first.
    """
    order = [difficulty]
    span = bounds.max_difficulty - bounds.min_difficulty
    for offset in range(1, span + abs(difficulty - bounds.clamp(difficulty)) + 1):
        for candidate in (difficulty - offset, difficulty + offset):
            if candidate in bounds:
                order.append(candidate)
    return order


class QuestionRepository:
    """Picks questions for a session from the catalog."""

    def __init__(self, catalog: QuestionCatalog, history: AnswerHistory,
                 exclusion_window: int = RECENT_EXCLUSION_WINDOW):
        self.catalog = catalog
        self.history = history
        self.exclusion_window = exclusion_window

    async def get_by_id(self, question_id: str) -> Optional[Question]:
        return await self.catalog.find_by_id(question_id)

    async def _excluded_ids(self, user_id: str, session_id: str) -> List[str]:
        return await self.history.recent_question_ids(user_id, session_id, self.exclusion_window)

    async def pick(self, user_id: str, session_id: str, difficulty: int,
                   excluded_ids: Optional[Sequence[str]] = None) -> Optional[Question]:
        """
        Random question at exactly ``difficulty`` that the session has not
        answered recently.

        Args:
            user_id: Owner of the session
            session_id: Session being served
            difficulty: Difficulty to draw from
            excluded_ids: Precomputed exclusion list (looked up when omitted)

        Returns:
            A Question, or None when every candidate is excluded or none exist
        """
        if excluded_ids is None:
            excluded_ids = await self._excluded_ids(user_id, session_id)
        return await self.catalog.find_by_difficulty_excluding(difficulty, excluded_ids)

    async def pick_with_fallback(self, user_id: str, session_id: str, difficulty: int,
                                 bounds: DifficultyBounds) -> Question:
        """
        Pick a question near ``difficulty``.

        Tries every difficulty from ``fallback_order`` with the recency
        exclusion, then the requested difficulty without it.

        Raises:
            NoQuestionsAvailable: If the catalog has no question at the
                requested difficulty under any exclusion policy
        """
        excluded_ids = await self._excluded_ids(user_id, session_id)

        for candidate in fallback_order(difficulty, bounds):
            question = await self.pick(user_id, session_id, candidate, excluded_ids)
            if question is not None:
                if candidate != difficulty:
                    logger.info(
                        f"No fresh question at difficulty {difficulty} for session {session_id}, "
                        f"served difficulty {candidate}"
                    )
                return question

        question = await self.catalog.find_any_by_difficulty(difficulty)
        if question is not None:
            logger.info(f"Recency window exhausted for session {session_id}, repeating a question")
            return question

        logger.error(f"Catalog has no questions at difficulty {difficulty}")
        raise NoQuestionsAvailable(difficulty)

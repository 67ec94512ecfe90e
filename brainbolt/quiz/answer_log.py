"""
Answer Log Store

Append-only record of answered questions. The unique key on
(user_id, session_id, question_id) is what makes scoring exactly-once:
a second insert for the same key fails and the caller replays the
stored outcome instead.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from brainbolt.common.exceptions import DuplicateAnswer
from brainbolt.common.logger import app_logger
from brainbolt.database.init_db import Database
from brainbolt.database.models import AnswerLog
from brainbolt.quiz.models import AnswerRecord

logger = app_logger.getChild("quiz.answer_log")


def _to_record(row: AnswerLog) -> AnswerRecord:
    return AnswerRecord(
        user_id=row.user_id,
        session_id=row.session_id,
        question_id=row.question_id,
        correct=bool(row.correct),
        served_difficulty=int(row.served_difficulty),
        score_delta=int(row.score_delta),
        streak_after=int(row.streak_after),
        new_difficulty=int(row.new_difficulty),
        total_score_after=int(row.total_score_after),
        answered_at=row.answered_at,
    )


class AnswerLogStore:
    """Reads and appends answer records."""

    def __init__(self, database: Database):
        self.database = database

    async def get(self, user_id: str, session_id: str, question_id: str) -> Optional[AnswerRecord]:
        """
        Get the recorded answer for a question in a session.

        Returns:
            The AnswerRecord, or None if the question has not been answered
        """
        async with self.database.session() as db:
            result = await db.execute(
                select(AnswerLog).where(
                    AnswerLog.user_id == user_id,
                    AnswerLog.session_id == session_id,
                    AnswerLog.question_id == question_id
                )
            )
            row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def insert(self, db: AsyncSession, record: AnswerRecord) -> None:
        """
        Append ``record`` inside the caller's transaction.

        The statement is flushed immediately so a uniqueness violation
        surfaces here rather than at commit.

        Raises:
            DuplicateAnswer: If the (user, session, question) key already exists
        """
        row = AnswerLog(
            user_id=record.user_id,
            session_id=record.session_id,
            question_id=record.question_id,
            correct=record.correct,
            served_difficulty=record.served_difficulty,
            score_delta=record.score_delta,
            streak_after=record.streak_after,
            new_difficulty=record.new_difficulty,
            total_score_after=record.total_score_after,
            answered_at=record.answered_at,
        )
        db.add(row)
        try:
            await db.flush()
        except IntegrityError as e:
            logger.info(
                f"Answer for question {record.question_id} in session {record.session_id} "
                f"was recorded concurrently"
            )
            raise DuplicateAnswer(record.user_id, record.session_id, record.question_id, e) from e

    async def recent_question_ids(self, user_id: str, session_id: str, limit: int) -> List[str]:
        """Ids of the session's ``limit`` most recently answered questions, newest first."""
        if limit <= 0:
            return []
        async with self.database.session() as db:
            result = await db.execute(
                select(AnswerLog.question_id)
                .where(AnswerLog.user_id == user_id, AnswerLog.session_id == session_id)
                .order_by(AnswerLog.answered_at.desc(), AnswerLog.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

"""
SQLAlchemy ORM models for the quiz engine.

- User: known user ids
- UserState: one row per (user, session) with the full session state
- AnswerLog: append-only answer records, unique per (user, session, question)
- LeaderboardScore / LeaderboardStreak: per-user leaderboard aggregates
- QuestionRecord: the read-only question catalog
"""

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, Float, Index, Integer,
    String, Text, UniqueConstraint
)

from brainbolt.common.clock import utc_now
from brainbolt.database.base import ModelBase


class User(ModelBase):
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)


class UserState(ModelBase):
    """
    Durable copy of a quiz session's state.

    ``expires_at`` is absolute; rows past it are treated as absent but never
    deleted by the engine.
    """
    __tablename__ = "user_state"

    user_id = Column(String(255), primary_key=True)
    session_id = Column(String(64), primary_key=True)
    current_difficulty = Column(Integer, nullable=False)
    current_score = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    highest_streak = Column(Integer, nullable=False, default=0)
    total_answered = Column(Integer, nullable=False, default=0)
    total_correct = Column(Integer, nullable=False, default=0)
    wrong_streak = Column(Integer, nullable=False, default=0)
    ema_performance = Column(Float, nullable=False, default=0.0)
    cooldown = Column(Integer, nullable=False, default=0)
    current_question_id = Column(String(64), nullable=True)
    question_issued_at = Column(DateTime, nullable=True)
    last_seen_at = Column(DateTime, nullable=False, default=utc_now)
    expires_at = Column(DateTime, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("current_score >= 0", name="score_non_negative"),
        CheckConstraint("total_correct <= total_answered", name="correct_within_answered"),
    )


class AnswerLog(ModelBase):
    """One row per answered question; the unique key makes scoring exactly-once."""
    __tablename__ = "answer_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    session_id = Column(String(64), nullable=False)
    question_id = Column(String(64), nullable=False)
    correct = Column(Boolean, nullable=False)
    served_difficulty = Column(Integer, nullable=False)
    score_delta = Column(Integer, nullable=False)
    streak_after = Column(Integer, nullable=False)
    new_difficulty = Column(Integer, nullable=False)
    total_score_after = Column(Integer, nullable=False)
    answered_at = Column(DateTime, nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("user_id", "session_id", "question_id", name="uq_answer_log_user_session_question"),
        Index("ix_answer_log_session_recent", "user_id", "session_id", "answered_at"),
    )


class LeaderboardScore(ModelBase):
    __tablename__ = "leaderboard_score"

    user_id = Column(String(255), primary_key=True)
    total_score = Column(Integer, nullable=False, default=0, index=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now)


class LeaderboardStreak(ModelBase):
    __tablename__ = "leaderboard_streak"

    user_id = Column(String(255), primary_key=True)
    highest_streak = Column(Integer, nullable=False, default=0, index=True)
    updated_at = Column(DateTime, nullable=False, default=utc_now)


class QuestionRecord(ModelBase):
    """Catalog entry. Only the digest of the normalized correct answer is stored."""
    __tablename__ = "questions"

    id = Column(String(64), primary_key=True)
    difficulty = Column(Integer, nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    choices = Column(JSON, nullable=False)
    correct_answer_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)

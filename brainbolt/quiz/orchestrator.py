"""
Quiz Orchestrator

Entry points of the quiz engine. A session alternates between two states:
no active question, and a question issued and awaiting its answer.

``get_next`` issues a question (or re-issues the active one).
``submit_answer`` grades the active question and commits the answer
record, the session and both leaderboard aggregates in one transaction.
Submissions are idempotent per (user, session, question): replays return
the stored outcome without touching any state.
"""

import logging
from dataclasses import replace
from typing import Optional

from brainbolt.common.cache import CacheBackend, RankedCache
from brainbolt.common.clock import Clock, utc_now
from brainbolt.common.exceptions import (
    DuplicateAnswer,
    QuestionMismatch,
    QuestionNotFound,
    SessionExpired
)
from brainbolt.common.hashing import answer_matches
from brainbolt.common.logger import app_logger, log_execution_time, with_context
from brainbolt.database.init_db import Database
from brainbolt.database.models import User
from brainbolt.domain.questions import QuestionCatalog, QuestionRepository, SqlQuestionCatalog
from brainbolt.leaderboard.service import LeaderboardService
from brainbolt.quiz.adaptive import DifficultyBounds, step
from brainbolt.quiz.answer_log import AnswerLogStore
from brainbolt.quiz.models import AnswerRecord, AnswerResult, NextQuestion, SessionState
from brainbolt.quiz.scoring import score_delta
from brainbolt.quiz.session_store import SessionStateStore

logger = app_logger.getChild("quiz.orchestrator")

CACHE_REFRESH_ATTEMPTS = 2


class QuizOrchestrator:
    """Serves questions and grades answers for quiz sessions."""

    def __init__(
        self,
        database: Database,
        sessions: SessionStateStore,
        questions: QuestionRepository,
        answers: AnswerLogStore,
        leaderboard: LeaderboardService,
        bounds: DifficultyBounds,
        clock: Clock = utc_now,
        cache_refresh_attempts: int = CACHE_REFRESH_ATTEMPTS
    ):
        self.database = database
        self.sessions = sessions
        self.questions = questions
        self.answers = answers
        self.leaderboard = leaderboard
        self.bounds = bounds
        self.clock = clock
        self.cache_refresh_attempts = max(1, cache_refresh_attempts)

    @log_execution_time(logger, failure_level=logging.WARNING)
    async def get_next(self, user_id: str, session_id: Optional[str] = None) -> NextQuestion:
        """
        Get the question the user should answer next.

        A missing, unknown or expired session id starts a fresh session.
        While a question is active it is returned unchanged, so repeated
        calls never skip a question.

        Args:
            user_id: Caller's user id
            session_id: Session to continue, if any

        Returns:
            The question with the session's id, score and streak

        Raises:
            NoQuestionsAvailable: If the catalog cannot serve any question
        """
        await self._ensure_user(user_id)

        state = await self.sessions.load(user_id, session_id) if session_id else None
        if state is None:
            state = await self.sessions.create_fresh(user_id)

        log = with_context(logger.name, user_id=user_id, session_id=state.session_id)

        if state.has_active_question and await self._already_answered(state):
            # The cached copy lags a committed answer
            log.warning(f"Question {state.current_question_id} was already answered, reloading the session")
            state = await self.sessions.load(user_id, state.session_id, use_cache=False)
            if state is None:
                state = await self.sessions.create_fresh(user_id)

        if state.has_active_question:
            question = await self.questions.get_by_id(state.current_question_id)
            if question is not None:
                # Persisting renews the session TTL
                state = await self.sessions.persist(state)
                return NextQuestion(question, state.session_id, state.current_score, state.current_streak)
            log.warning(f"Active question {state.current_question_id} no longer exists, issuing a new one")

        question = await self.questions.pick_with_fallback(
            user_id, state.session_id, state.current_difficulty, self.bounds
        )
        issued = replace(
            state,
            current_difficulty=question.difficulty,
            current_question_id=question.id,
            question_issued_at=self.clock(),
        )
        issued = await self.sessions.persist(issued)
        log.debug(f"Issued question {question.id} at difficulty {question.difficulty}")
        return NextQuestion(question, issued.session_id, issued.current_score, issued.current_streak)

    @log_execution_time(logger, failure_level=logging.WARNING)
    async def submit_answer(self, user_id: str, session_id: str, question_id: str,
                            answer: str) -> AnswerResult:
        """
        Grade an answer to the session's active question.

        Args:
            user_id: Caller's user id
            session_id: Session the question was issued in
            question_id: Question being answered
            answer: Raw answer text

        Returns:
            The outcome; identical for every resubmission of the same question

        Raises:
            SessionExpired: If the session does not exist or has expired
            QuestionMismatch: If ``question_id`` is not the active question
            QuestionNotFound: If the active question was removed from the catalog
        """
        log = with_context(logger.name, user_id=user_id, session_id=session_id)

        existing = await self.answers.get(user_id, session_id, question_id)
        if existing is not None:
            log.info(f"Replaying stored result for question {question_id}")
            return AnswerResult.from_record(existing)

        state = await self.sessions.load(user_id, session_id)
        if state is None or state.current_question_id != question_id:
            # A concurrent submission may have committed since the first lookup
            existing = await self.answers.get(user_id, session_id, question_id)
            if existing is not None:
                log.info(f"Replaying result committed concurrently for question {question_id}")
                return AnswerResult.from_record(existing)
            state = await self.sessions.load(user_id, session_id, use_cache=False)
        if state is None:
            raise SessionExpired(session_id)
        if state.current_question_id != question_id:
            raise QuestionMismatch(session_id, question_id)

        question = await self.questions.get_by_id(question_id)
        if question is None:
            log.warning(f"Active question {question_id} no longer exists, clearing it")
            await self.sessions.persist(replace(state, current_question_id=None, question_issued_at=None))
            raise QuestionNotFound(question_id)

        correct = answer_matches(answer, question.correct_answer_hash)
        record, updated = self._grade(state, question_id, question.difficulty, correct)

        try:
            async with self.database.transaction() as db:
                await self.answers.insert(db, record)
                saved = await self.sessions.write(db, updated)
                await self.leaderboard.record(db, user_id, saved.current_score, saved.highest_streak)
        except DuplicateAnswer:
            stored = await self.answers.get(user_id, session_id, question_id)
            if stored is None:
                raise
            log.info(f"Lost submission race for question {question_id}, returning the stored result")
            return AnswerResult.from_record(stored)

        await self._refresh_caches(saved)
        log.debug(
            f"Graded question {question_id}: correct={correct} delta={record.score_delta} "
            f"difficulty={record.new_difficulty}"
        )
        return AnswerResult.from_record(record)

    def _grade(self, state: SessionState, question_id: str, served_difficulty: int, correct: bool):
        """Compute the answer record and the next session state from a snapshot of ``state``."""
        signals = step(state.signals(), correct, self.bounds)
        total_answered = state.total_answered + 1
        total_correct = state.total_correct + (1 if correct else 0)
        delta = score_delta(correct, served_difficulty, signals.streak, total_answered, total_correct)

        updated = replace(
            state,
            current_difficulty=signals.difficulty,
            current_streak=signals.streak,
            highest_streak=max(state.highest_streak, signals.streak),
            wrong_streak=signals.wrong_streak,
            ema_performance=signals.ema_performance,
            cooldown=signals.cooldown,
            total_answered=total_answered,
            total_correct=total_correct,
            current_score=state.current_score + delta,
            current_question_id=None,
            question_issued_at=None,
        )
        record = AnswerRecord(
            user_id=state.user_id,
            session_id=state.session_id,
            question_id=question_id,
            correct=correct,
            served_difficulty=served_difficulty,
            score_delta=delta,
            streak_after=signals.streak,
            new_difficulty=signals.difficulty,
            total_score_after=updated.current_score,
            answered_at=self.clock(),
        )
        return record, updated

    async def _already_answered(self, state: SessionState) -> bool:
        record = await self.answers.get(state.user_id, state.session_id, state.current_question_id)
        return record is not None

    async def _ensure_user(self, user_id: str) -> None:
        async with self.database.transaction() as db:
            stmt = self.database.insert(User).values(id=user_id, created_at=self.clock())
            await db.execute(stmt.on_conflict_do_nothing(index_elements=[User.id]))

    async def _refresh_caches(self, state: SessionState) -> None:
        """Best-effort mirror of committed state into the caches."""
        session_done = leaderboard_done = False
        for _ in range(self.cache_refresh_attempts):
            if not session_done:
                session_done = await self.sessions.refresh_cache(state)
            if not leaderboard_done:
                try:
                    leaderboard_done = await self.leaderboard.mirror(
                        state.user_id, state.current_score, state.highest_streak
                    )
                except Exception as e:
                    logger.warning(f"Leaderboard cache update raised for user {state.user_id}: {e}")
            if session_done and leaderboard_done:
                return

        logger.warning(
            f"Cache refresh for session {state.session_id} gave up after "
            f"{self.cache_refresh_attempts} attempts"
        )
        if not session_done:
            await self.sessions.invalidate(state.user_id, state.session_id)


def build_orchestrator(
    settings,
    database: Database,
    cache: CacheBackend,
    ranked_cache: RankedCache,
    catalog: Optional[QuestionCatalog] = None,
    clock: Clock = utc_now
) -> QuizOrchestrator:
    """
    Wire the stores and services into an orchestrator.

    Args:
        settings: Application settings
        database: Durable store
        cache: Session cache
        ranked_cache: Leaderboard cache
        catalog: Question catalog (defaults to the SQL catalog)
        clock: Shared time source

    Returns:
        QuizOrchestrator
    """
    answers = AnswerLogStore(database)
    sessions = SessionStateStore(
        database,
        cache,
        session_ttl_seconds=settings.SESSION_TTL_SECONDS,
        default_difficulty=settings.DEFAULT_DIFFICULTY,
        clock=clock,
    )
    questions = QuestionRepository(catalog or SqlQuestionCatalog(database), answers)
    leaderboard = LeaderboardService(database, ranked_cache, clock=clock)
    return QuizOrchestrator(
        database,
        sessions,
        questions,
        answers,
        leaderboard,
        settings.difficulty_bounds,
        clock=clock,
    )

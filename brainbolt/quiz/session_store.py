"""
Session State Store

Cache-aside repository for quiz sessions. The ``user_state`` table is the
source of truth; the cache holds a serialized copy whose TTL matches the
session lifetime.

Reads go to the cache first and fall back to the database, warming the
cache with the session's remaining lifetime. Writes go to the database
first and refresh the cache afterwards. A cache failure is logged and
never fails the operation, so the store degrades to database-only reads
when the cache is down.

Two concurrent writers for the same session are last-writer-wins here;
exactly-once scoring is enforced by the answer log, not by this store.
"""

import datetime
import uuid
from dataclasses import replace
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brainbolt.common.cache import CacheBackend
from brainbolt.common.clock import Clock, utc_now
from brainbolt.common.logger import app_logger
from brainbolt.database.init_db import Database
from brainbolt.database.models import UserState
from brainbolt.quiz.models import SessionState

logger = app_logger.getChild("quiz.session_store")

DEFAULT_SESSION_TTL_SECONDS = 1800
DEFAULT_DIFFICULTY = 3

# Columns rewritten by every upsert
_MUTABLE_FIELDS = (
    "current_difficulty", "current_score", "current_streak", "highest_streak",
    "total_answered", "total_correct", "wrong_streak", "ema_performance",
    "cooldown", "current_question_id", "question_issued_at",
    "last_seen_at", "expires_at",
)


def state_cache_key(user_id: str, session_id: str) -> str:
    return f"state:{user_id}:{session_id}"


def _from_row(row: UserState) -> SessionState:
    return SessionState(
        user_id=row.user_id,
        session_id=row.session_id,
        current_difficulty=int(row.current_difficulty),
        current_score=int(row.current_score),
        current_streak=int(row.current_streak),
        highest_streak=int(row.highest_streak),
        total_answered=int(row.total_answered),
        total_correct=int(row.total_correct),
        wrong_streak=int(row.wrong_streak),
        ema_performance=float(row.ema_performance),
        cooldown=int(row.cooldown),
        current_question_id=row.current_question_id,
        question_issued_at=row.question_issued_at,
        expires_at=row.expires_at,
    )


class SessionStateStore:
    """Loads, persists and creates quiz sessions."""

    def __init__(
        self,
        database: Database,
        cache: CacheBackend,
        session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        default_difficulty: int = DEFAULT_DIFFICULTY,
        clock: Clock = utc_now
    ):
        """
        Initialize the store.

        Args:
            database: Durable store
            cache: Key/value cache for serialized sessions
            session_ttl_seconds: Session lifetime, renewed on every persist
            default_difficulty: Difficulty of freshly created sessions
            clock: Source of the current naive-UTC time
        """
        self.database = database
        self.cache = cache
        self.session_ttl_seconds = session_ttl_seconds
        self.default_difficulty = default_difficulty
        self.clock = clock

    async def load(self, user_id: str, session_id: str, use_cache: bool = True) -> Optional[SessionState]:
        """
        Load a live session.

        Args:
            user_id: Owner of the session
            session_id: Session to load
            use_cache: Read the cache first; with False the database row is
                read and the cache entry overwritten with it

        Returns:
            The session state, or None if it does not exist or has expired
        """
        now = self.clock()
        key = state_cache_key(user_id, session_id)

        cached = await self._read_cache(key) if use_cache else None
        if cached is not None:
            if cached.expires_at is None or cached.expires_at > now:
                return cached
            logger.debug(f"Cached session {session_id} is past its expiry")
            return None

        async with self.database.session() as db:
            result = await db.execute(
                select(UserState).where(
                    UserState.user_id == user_id,
                    UserState.session_id == session_id
                )
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None
        if row.expires_at <= now:
            # Lazy expiry: the row stays, the session is gone
            return None

        state = _from_row(row)
        remaining = int((row.expires_at - now).total_seconds())
        if remaining > 0:
            await self._write_cache(state, remaining)
        return state

    async def persist(self, state: SessionState) -> SessionState:
        """
        Write a session to the database, then refresh its cache entry.

        Returns:
            The saved state with its renewed ``expires_at``
        """
        async with self.database.transaction() as db:
            saved = await self.write(db, state)
        if not await self.refresh_cache(saved):
            await self.invalidate(saved.user_id, saved.session_id)
        return saved

    async def write(self, db: AsyncSession, state: SessionState) -> SessionState:
        """
        Upsert a session inside the caller's transaction.

        The cache is not touched; call ``refresh_cache`` once the
        transaction has committed.
        """
        now = self.clock()
        saved = replace(state, expires_at=now + datetime.timedelta(seconds=self.session_ttl_seconds))

        values: Dict[str, Any] = {
            "user_id": saved.user_id,
            "session_id": saved.session_id,
            "current_difficulty": saved.current_difficulty,
            "current_score": saved.current_score,
            "current_streak": saved.current_streak,
            "highest_streak": saved.highest_streak,
            "total_answered": saved.total_answered,
            "total_correct": saved.total_correct,
            "wrong_streak": saved.wrong_streak,
            "ema_performance": saved.ema_performance,
            "cooldown": saved.cooldown,
            "current_question_id": saved.current_question_id,
            "question_issued_at": saved.question_issued_at,
            "last_seen_at": now,
            "expires_at": saved.expires_at,
        }
        stmt = self.database.insert(UserState).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserState.user_id, UserState.session_id],
            set_={name: stmt.excluded[name] for name in _MUTABLE_FIELDS}
        )
        await db.execute(stmt)
        return saved

    async def refresh_cache(self, state: SessionState) -> bool:
        """Store ``state`` in the cache with the full session TTL; False on failure."""
        return await self._write_cache(state, self.session_ttl_seconds)

    async def invalidate(self, user_id: str, session_id: str) -> bool:
        """Drop the cached copy of a session so the next load reads the database."""
        key = state_cache_key(user_id, session_id)
        try:
            return await self.cache.delete(key)
        except Exception as e:
            logger.warning(f"Session cache delete failed for {key}: {e}")
            return False

    async def create_fresh(self, user_id: str) -> SessionState:
        """Create and persist a new session with default signals and no active question."""
        state = SessionState(
            user_id=user_id,
            session_id=str(uuid.uuid4()),
            current_difficulty=self.default_difficulty,
        )
        saved = await self.persist(state)
        logger.info(f"Created session {saved.session_id} for user {user_id}")
        return saved

    async def _read_cache(self, key: str) -> Optional[SessionState]:
        try:
            result = await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Session cache read failed for {key}: {e}")
            return None

        if not result.hit:
            return None
        try:
            return SessionState.from_cache_dict(result.value)
        except (TypeError, ValueError, KeyError) as e:
            logger.warning(f"Ignoring malformed cached session {key}: {e}")
            return None

    async def _write_cache(self, state: SessionState, ttl: int) -> bool:
        key = state_cache_key(state.user_id, state.session_id)
        try:
            result = await self.cache.set(key, state.to_cache_dict(), ttl=ttl)
        except Exception as e:
            logger.warning(f"Session cache write failed for {key}: {e}")
            return False

        if not result.success:
            logger.warning(f"Session cache write failed for {key}: {result.error}")
        return result.success

"""
Leaderboard Service

Top-N rankings by total score and by highest streak. The durable
``leaderboard_score`` and ``leaderboard_streak`` tables are authoritative;
a ranked cache (Redis sorted sets in production) serves reads and is
warmed from the tables on a cold start.

The two metrics merge differently: the score aggregate always takes the
latest session total, the streak aggregate only ever goes up.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brainbolt.common.cache import RankedCache
from brainbolt.common.clock import Clock, utc_now
from brainbolt.common.logger import app_logger
from brainbolt.database.init_db import Database
from brainbolt.database.models import LeaderboardScore, LeaderboardStreak

logger = app_logger.getChild("leaderboard.service")


class LeaderboardMetric(enum.Enum):
    """Ranked metrics and their cache keys."""
    SCORE = "score"
    STREAK = "streak"

    @property
    def cache_key(self) -> str:
        return f"lb:{self.value}"


@dataclass(frozen=True)
class LeaderboardItem:
    """One ranked row; ranks start at 1."""
    rank: int
    user_id: str
    value: int

    def to_dict(self) -> Dict[str, Any]:
        return {'rank': self.rank, 'userId': self.user_id, 'value': self.value}


def _ranked(pairs) -> List[LeaderboardItem]:
    return [
        LeaderboardItem(rank=index, user_id=str(user_id), value=int(value))
        for index, (user_id, value) in enumerate(pairs, start=1)
    ]


class LeaderboardService:
    """Reads and updates the score and streak leaderboards."""

    def __init__(self, database: Database, ranked_cache: RankedCache, clock: Clock = utc_now):
        """
        Initialize the service.

        Args:
            database: Durable store holding the aggregate tables
            ranked_cache: Ranked cache mirroring the aggregates
            clock: Source of ``updated_at`` timestamps
        """
        self.database = database
        self.ranked_cache = ranked_cache
        self.clock = clock

    async def top_n(self, metric: LeaderboardMetric, limit: int) -> List[LeaderboardItem]:
        """
        Get the ``limit`` best users for a metric, highest first.

        Served from the ranked cache when it holds any entries. Otherwise
        the aggregate table is queried and exactly the returned rows are
        written to the cache.

        Args:
            metric: Metric to rank by
            limit: Maximum number of entries

        Returns:
            Ranked items with 1-based ranks
        """
        if limit <= 0:
            return []

        cached = await self.ranked_cache.top(metric.cache_key, limit)
        if cached.success and cached.hit:
            return _ranked(cached.value)

        rows = await self._query_top(metric, limit)
        if rows:
            warmed = await self.ranked_cache.add_many(
                metric.cache_key, {user_id: float(value) for user_id, value in rows}
            )
            if warmed:
                logger.info(f"Warmed {metric.value} leaderboard cache with {len(rows)} entries")
        return _ranked(rows)

    async def top_scores(self, limit: int) -> List[LeaderboardItem]:
        return await self.top_n(LeaderboardMetric.SCORE, limit)

    async def top_streaks(self, limit: int) -> List[LeaderboardItem]:
        return await self.top_n(LeaderboardMetric.STREAK, limit)

    async def _query_top(self, metric: LeaderboardMetric, limit: int):
        if metric is LeaderboardMetric.SCORE:
            column, key = LeaderboardScore.total_score, LeaderboardScore.user_id
        else:
            column, key = LeaderboardStreak.highest_streak, LeaderboardStreak.user_id

        async with self.database.session() as db:
            result = await db.execute(
                select(key, column).order_by(column.desc(), key.asc()).limit(limit)
            )
            return [(row[0], row[1]) for row in result.all()]

    async def record(self, db: AsyncSession, user_id: str, total_score: int, highest_streak: int) -> None:
        """
        Upsert both aggregates for ``user_id`` inside the caller's transaction.

        Args:
            db: Session with an open transaction
            user_id: Ranked user
            total_score: The user's latest session total (overwrites)
            highest_streak: Best streak of the session (kept only if higher)
        """
        now = self.clock()

        score_stmt = self.database.insert(LeaderboardScore).values(
            user_id=user_id, total_score=total_score, updated_at=now
        )
        score_stmt = score_stmt.on_conflict_do_update(
            index_elements=[LeaderboardScore.user_id],
            set_={
                "total_score": score_stmt.excluded.total_score,
                "updated_at": score_stmt.excluded.updated_at,
            }
        )
        await db.execute(score_stmt)

        streak_stmt = self.database.insert(LeaderboardStreak).values(
            user_id=user_id, highest_streak=highest_streak, updated_at=now
        )
        streak_stmt = streak_stmt.on_conflict_do_update(
            index_elements=[LeaderboardStreak.user_id],
            set_={
                "highest_streak": self.database.greatest(
                    LeaderboardStreak.highest_streak, streak_stmt.excluded.highest_streak
                ),
                "updated_at": streak_stmt.excluded.updated_at,
            }
        )
        await db.execute(streak_stmt)

    async def mirror(self, user_id: str, total_score: int, highest_streak: int) -> bool:
        """
        Copy committed aggregates into the ranked cache.

        A ranked set that is not in the cache is left alone; the next
        ``top_n`` rebuilds it from the table.

        Returns:
            True if both sets are up to date or absent
        """
        score_ok = await self._mirror_one(
            LeaderboardMetric.SCORE, user_id, total_score, self.ranked_cache.add
        )
        streak_ok = await self._mirror_one(
            LeaderboardMetric.STREAK, user_id, highest_streak, self.ranked_cache.add_max
        )
        if not (score_ok and streak_ok):
            logger.warning(f"Leaderboard cache update failed for user {user_id}")
        return score_ok and streak_ok

    async def _mirror_one(self, metric: LeaderboardMetric, user_id: str, value: int, write) -> bool:
        present = await self.ranked_cache.exists(metric.cache_key)
        if not present.success:
            return False
        if not present.hit:
            logger.debug(f"{metric.value} leaderboard is not cached, leaving it to the next read")
            return True
        return await write(metric.cache_key, user_id, float(value))

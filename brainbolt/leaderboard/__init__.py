"""Score and streak leaderboards."""

from .service import LeaderboardItem, LeaderboardMetric, LeaderboardService

__all__ = ['LeaderboardItem', 'LeaderboardMetric', 'LeaderboardService']

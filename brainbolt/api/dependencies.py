"""
FastAPI dependencies resolving the services created at startup.
"""

from fastapi import Request

from brainbolt.database.init_db import Database
from brainbolt.leaderboard.service import LeaderboardService
from brainbolt.quiz.orchestrator import QuizOrchestrator


def get_orchestrator(request: Request) -> QuizOrchestrator:
    return request.app.state.orchestrator


def get_leaderboard(request: Request) -> LeaderboardService:
    return request.app.state.orchestrator.leaderboard


def get_database(request: Request) -> Database:
    return request.app.state.database

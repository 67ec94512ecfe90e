"""
Quiz API Routes

Thin HTTP adapters over the quiz orchestrator and the leaderboard service.
Domain errors propagate to the handlers in ``brainbolt.api.errors``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from brainbolt.api.dependencies import get_database, get_leaderboard, get_orchestrator
from brainbolt.api.schemas import (
    AnswerResultResponse,
    ErrorResponse,
    HealthResponse,
    LeaderboardEntryResponse,
    NextQuestionResponse,
    SubmitAnswerRequest
)
from brainbolt.common.exceptions import ValidationError
from brainbolt.common.logger import app_logger
from brainbolt.database.init_db import Database
from brainbolt.leaderboard.service import LeaderboardService
from brainbolt.quiz.orchestrator import QuizOrchestrator

logger = app_logger.getChild("api.routes")

API_VERSION = "v1"
DEFAULT_LEADERBOARD_LIMIT = 20
MAX_LEADERBOARD_LIMIT = 100

VALIDATION_ERROR = {422: {"model": ErrorResponse}}
NEXT_QUESTION_ERRORS = {**VALIDATION_ERROR, 503: {"model": ErrorResponse}}
SUBMIT_ANSWER_ERRORS = {
    **VALIDATION_ERROR,
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    410: {"model": ErrorResponse},
}

quiz_router = APIRouter()
leaderboard_router = APIRouter()
health_router = APIRouter()


@quiz_router.get(
    "/next", response_model=NextQuestionResponse, response_model_by_alias=True, responses=NEXT_QUESTION_ERRORS
)
async def get_next_question(
    user_id: str = Query(..., alias="userId", max_length=255),
    session_id: Optional[str] = Query(None, alias="sessionId", max_length=64),
    orchestrator: QuizOrchestrator = Depends(get_orchestrator)
):
    """
    Get the next question of a quiz session.

    Without ``sessionId`` (or with an unknown or expired one) a new session
    is started; the response carries the id to use from then on.
    """
    if not user_id.strip():
        raise ValidationError("userId cannot be empty", {"userId": "empty"})
    if session_id is not None and not session_id.strip():
        session_id = None

    result = await orchestrator.get_next(user_id, session_id)
    return result.to_dict()


@quiz_router.post(
    "/answer", response_model=AnswerResultResponse, response_model_by_alias=True, responses=SUBMIT_ANSWER_ERRORS
)
async def submit_answer(
    payload: SubmitAnswerRequest,
    orchestrator: QuizOrchestrator = Depends(get_orchestrator)
):
    """Submit the answer to the session's active question."""
    result = await orchestrator.submit_answer(
        payload.user_id, payload.session_id, payload.question_id, payload.answer
    )
    return result.to_dict()


@leaderboard_router.get(
    "/score", response_model=List[LeaderboardEntryResponse], response_model_by_alias=True, responses=VALIDATION_ERROR
)
async def top_scores(
    limit: int = Query(DEFAULT_LEADERBOARD_LIMIT, ge=1, le=MAX_LEADERBOARD_LIMIT),
    leaderboard: LeaderboardService = Depends(get_leaderboard)
):
    items = await leaderboard.top_scores(limit)
    return [item.to_dict() for item in items]


@leaderboard_router.get(
    "/streak", response_model=List[LeaderboardEntryResponse], response_model_by_alias=True, responses=VALIDATION_ERROR
)
async def top_streaks(
    limit: int = Query(DEFAULT_LEADERBOARD_LIMIT, ge=1, le=MAX_LEADERBOARD_LIMIT),
    leaderboard: LeaderboardService = Depends(get_leaderboard)
):
    items = await leaderboard.top_streaks(limit)
    return [item.to_dict() for item in items]


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request, database: Database = Depends(get_database)):
    database_ok = await database.ping()
    cache = getattr(request.app.state, "cache", None)
    return {
        "status": "ok" if database_ok else "degraded",
        "database": database_ok,
        "cache": cache.name if cache is not None else None,
    }


def include_routers(app) -> None:
    """Mount all routers on ``app`` under their versioned prefixes."""
    app.include_router(quiz_router, prefix=f"/{API_VERSION}/quiz", tags=["quiz"])
    app.include_router(leaderboard_router, prefix=f"/{API_VERSION}/leaderboard", tags=["leaderboard"])
    app.include_router(health_router, tags=["health"])
    logger.info(f"Registered {len(app.routes)} routes")

"""
Request and response models for the quiz HTTP API.

Field names on the wire are camelCase; Python attributes stay snake_case.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SubmitAnswerRequest(CamelModel):
    """
    Request model for submitting an answer to the session's active question.
    """
    user_id: str = Field(..., alias="userId", max_length=255, description="User identifier")
    session_id: str = Field(..., alias="sessionId", max_length=64, description="Quiz session identifier")
    question_id: str = Field(..., alias="questionId", max_length=64, description="Question identifier")
    answer: str = Field(..., min_length=1, max_length=1000, description="Answer text, compared case-insensitively")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "userId": "user-42",
                "sessionId": "4f6c1d1e-8a43-4e47-9d4e-1a0f7d1b2c3d",
                "questionId": "q-101",
                "answer": "Paris"
            }
        }
    )

    @field_validator('user_id', 'session_id', 'question_id')
    @classmethod
    def validate_ids(cls, v: str) -> str:
        """Validate that IDs are provided as non-empty strings."""
        if not v or not v.strip():
            raise ValueError("ID cannot be empty")
        return v


class NextQuestionResponse(CamelModel):
    question_id: str = Field(..., alias="questionId")
    difficulty: int
    prompt: str
    choices: List[str]
    session_id: str = Field(..., alias="sessionId")
    current_score: int = Field(..., alias="currentScore")
    current_streak: int = Field(..., alias="currentStreak")


class AnswerResultResponse(CamelModel):
    correct: bool
    new_difficulty: int = Field(..., alias="newDifficulty")
    new_streak: int = Field(..., alias="newStreak")
    score_delta: int = Field(..., alias="scoreDelta")
    total_score: int = Field(..., alias="totalScore")


class LeaderboardEntryResponse(CamelModel):
    rank: int
    user_id: str = Field(..., alias="userId")
    value: int


class HealthResponse(BaseModel):
    status: str
    database: bool
    cache: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    message: str

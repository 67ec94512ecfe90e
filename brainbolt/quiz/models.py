"""
Quiz domain models.

Plain dataclasses passed between the stores and the orchestrator, with
conversions to the cache payload and to the caller-facing responses.
"""

import datetime
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional

from brainbolt.common.clock import from_iso, to_iso
from brainbolt.domain.questions.model import Question
from brainbolt.quiz.adaptive import AdaptiveSignals


@dataclass
class SessionState:
    """
    State of one quiz session for one user.

    ``current_question_id`` is None while no question is issued. ``expires_at``
    is stamped by the session store on every persist.
    """
    user_id: str
    session_id: str
    current_difficulty: int
    current_score: int = 0
    current_streak: int = 0
    highest_streak: int = 0
    total_answered: int = 0
    total_correct: int = 0
    wrong_streak: int = 0
    ema_performance: float = 0.0
    cooldown: int = 0
    current_question_id: Optional[str] = None
    question_issued_at: Optional[datetime.datetime] = None
    expires_at: Optional[datetime.datetime] = None

    @property
    def has_active_question(self) -> bool:
        return self.current_question_id is not None

    def signals(self) -> AdaptiveSignals:
        """Snapshot of the fields the adaptive engine works on."""
        return AdaptiveSignals(
            difficulty=self.current_difficulty,
            streak=self.current_streak,
            wrong_streak=self.wrong_streak,
            ema_performance=self.ema_performance,
            cooldown=self.cooldown,
        )

    def copy(self) -> 'SessionState':
        return replace(self)

    def to_cache_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['question_issued_at'] = to_iso(self.question_issued_at)
        data['expires_at'] = to_iso(self.expires_at)
        return data

    @classmethod
    def from_cache_dict(cls, data: Dict[str, Any]) -> 'SessionState':
        values = dict(data)
        values['question_issued_at'] = from_iso(values.get('question_issued_at'))
        values['expires_at'] = from_iso(values.get('expires_at'))
        return cls(**values)


@dataclass(frozen=True)
class AnswerRecord:
    """Outcome of one answered question, as stored in the answer log."""
    user_id: str
    session_id: str
    question_id: str
    correct: bool
    served_difficulty: int
    score_delta: int
    streak_after: int
    new_difficulty: int
    total_score_after: int
    answered_at: Optional[datetime.datetime] = None


@dataclass(frozen=True)
class NextQuestion:
    """Response of ``get_next``."""
    question: Question
    session_id: str
    current_score: int
    current_streak: int

    def to_dict(self) -> Dict[str, Any]:
        payload = self.question.to_public_dict()
        payload.update({
            'sessionId': self.session_id,
            'currentScore': self.current_score,
            'currentStreak': self.current_streak,
        })
        return payload


@dataclass(frozen=True)
class AnswerResult:
    """Response of ``submit_answer``; identical for every replay of the same answer."""
    correct: bool
    new_difficulty: int
    new_streak: int
    score_delta: int
    total_score: int

    @classmethod
    def from_record(cls, record: AnswerRecord) -> 'AnswerResult':
        return cls(
            correct=record.correct,
            new_difficulty=record.new_difficulty,
            new_streak=record.streak_after,
            score_delta=record.score_delta,
            total_score=record.total_score_after,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'correct': self.correct,
            'newDifficulty': self.new_difficulty,
            'newStreak': self.new_streak,
            'scoreDelta': self.score_delta,
            'totalScore': self.total_score,
        }


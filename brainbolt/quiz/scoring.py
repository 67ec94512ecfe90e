"""
Scoring Function

Points for a single answer. Wrong answers score nothing; correct answers
score ``difficulty * 10`` scaled by a capped streak multiplier (1.00x at
streak 1 up to 1.90x from streak 7) and an accuracy factor in [0.6, 1.0]
that rewards consistency without punishing beginners too hard.
"""

import math

STREAK_CAP = 7
STREAK_STEP = 0.15
BASE_POINTS_PER_LEVEL = 10
ACCURACY_FLOOR = 0.6
ACCURACY_WEIGHT = 0.4


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def streak_multiplier(streak_after: int) -> float:
    capped = min(streak_after, STREAK_CAP)
    return 1 + (capped - 1) * STREAK_STEP


def accuracy_factor(total_answered_after: int, total_correct_after: int) -> float:
    accuracy = total_correct_after / total_answered_after if total_answered_after > 0 else 0
    return ACCURACY_FLOOR + ACCURACY_WEIGHT * accuracy


def score_delta(
    correct: bool,
    difficulty: int,
    streak_after: int,
    total_answered_after: int,
    total_correct_after: int
) -> int:
    """
    Compute the points awarded for one answer.

    Args:
        correct: Whether the answer was correct
        difficulty: Difficulty of the served question
        streak_after: Correct streak including this answer
        total_answered_after: Answers in the session including this one
        total_correct_after: Correct answers in the session including this one

    Returns:
        Non-negative integer score delta
    """
    if not correct:
        return 0

    base = difficulty * BASE_POINTS_PER_LEVEL
    raw = base * streak_multiplier(streak_after) * accuracy_factor(total_answered_after, total_correct_after)
    return max(0, _round_half_up(raw))

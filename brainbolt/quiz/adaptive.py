"""
Adaptive Difficulty Engine

Pure transition function that moves a session's difficulty based on its
streaks and an exponential moving average (EMA) of recent correctness.

The EMA is kept in roughly [-1, 1]: a correct answer pushes it towards +1,
a wrong answer towards -1::

    ema' = ema * (1 - ALPHA) + ALPHA * (+1 if correct else -1)

Difficulty goes up by one only when the answer is correct, the correct
streak has reached ``MIN_STREAK_UP`` and the EMA is at least
``EMA_UP_THRESHOLD``. It goes down by one only when the answer is wrong,
the wrong streak has reached ``WRONG_BUFFER_DOWN`` and the EMA is at most
``EMA_DOWN_THRESHOLD``. Every change starts a cooldown of
``COOLDOWN_QUESTIONS`` answers during which difficulty is frozen, so the
next answer can't immediately flip it back.
"""

from dataclasses import dataclass, replace

ALPHA = 0.2
MIN_STREAK_UP = 2
WRONG_BUFFER_DOWN = 2
EMA_UP_THRESHOLD = 0.25
EMA_DOWN_THRESHOLD = -0.25
COOLDOWN_QUESTIONS = 2


@dataclass(frozen=True)
class DifficultyBounds:
    """Inclusive difficulty range served by the catalog."""
    min_difficulty: int
    max_difficulty: int

    def clamp(self, difficulty: int) -> int:
        return max(self.min_difficulty, min(self.max_difficulty, difficulty))

    def __contains__(self, difficulty: int) -> bool:
        return self.min_difficulty <= difficulty <= self.max_difficulty


@dataclass(frozen=True)
class AdaptiveSignals:
    """
    The slice of session state the engine reads and writes.

    Attributes:
        difficulty: Current difficulty level
        streak: Consecutive correct answers
        wrong_streak: Consecutive wrong answers
        ema_performance: Smoothed correctness signal
        cooldown: Answers left before difficulty may change again
    """
    difficulty: int
    streak: int = 0
    wrong_streak: int = 0
    ema_performance: float = 0.0
    cooldown: int = 0


def step(prev: AdaptiveSignals, correct: bool, bounds: DifficultyBounds) -> AdaptiveSignals:
    """
    Apply one answer outcome to the adaptive signals.

    Args:
        prev: Signals before the answer
        correct: Whether the answer was correct
        bounds: Allowed difficulty range

    Returns:
        New signals; ``prev`` is left untouched
    """
    signal = 1 if correct else -1
    ema = prev.ema_performance * (1 - ALPHA) + ALPHA * signal

    if correct:
        streak, wrong_streak = prev.streak + 1, 0
    else:
        streak, wrong_streak = 0, prev.wrong_streak + 1

    after = replace(prev, streak=streak, wrong_streak=wrong_streak, ema_performance=ema)

    if prev.cooldown > 0:
        return replace(after, difficulty=bounds.clamp(prev.difficulty), cooldown=prev.cooldown - 1)

    difficulty = prev.difficulty
    cooldown = prev.cooldown
    if correct and streak >= MIN_STREAK_UP and ema >= EMA_UP_THRESHOLD:
        difficulty += 1
        cooldown = COOLDOWN_QUESTIONS
    elif not correct and wrong_streak >= WRONG_BUFFER_DOWN and ema <= EMA_DOWN_THRESHOLD:
        difficulty -= 1
        cooldown = COOLDOWN_QUESTIONS

    return replace(after, difficulty=bounds.clamp(difficulty), cooldown=cooldown)

import unittest

from brainbolt.quiz.adaptive import (
    COOLDOWN_QUESTIONS,
    AdaptiveSignals,
    DifficultyBounds,
    step
)

BOUNDS = DifficultyBounds(1, 10)


def run_answers(signals, outcomes, bounds=BOUNDS):
    difficulties = []
    for correct in outcomes:
        signals = step(signals, correct, bounds)
        difficulties.append(signals.difficulty)
    return signals, difficulties


class TestAdaptiveStep(unittest.TestCase):
    """Test the adaptive difficulty step."""

    def test_fresh_session_ramp(self):
        """Five correct answers from difficulty 3 go 3, 4, 4, 4, 5."""
        _, difficulties = run_answers(AdaptiveSignals(difficulty=3), [True] * 5)
        self.assertEqual(difficulties, [3, 4, 4, 4, 5])

    def test_increase_sets_cooldown(self):
        """Two correct answers raise difficulty and start the cooldown."""
        signals, _ = run_answers(AdaptiveSignals(difficulty=3), [True, True])
        self.assertEqual(signals.difficulty, 4)
        self.assertEqual(signals.cooldown, COOLDOWN_QUESTIONS)
        self.assertEqual(signals.streak, 2)
        self.assertAlmostEqual(signals.ema_performance, 0.36)

    def test_single_correct_does_not_increase(self):
        """A streak of one is below the threshold."""
        signals = step(AdaptiveSignals(difficulty=3), True, BOUNDS)
        self.assertEqual(signals.difficulty, 3)
        self.assertEqual(signals.cooldown, 0)

    def test_decrease_after_wrong_buffer(self):
        """Two wrong answers from a neutral start lower difficulty by one."""
        signals, difficulties = run_answers(AdaptiveSignals(difficulty=5), [False, False])
        self.assertEqual(difficulties, [5, 4])
        self.assertEqual(signals.wrong_streak, 2)
        self.assertEqual(signals.streak, 0)
        self.assertEqual(signals.cooldown, COOLDOWN_QUESTIONS)

    def test_wrong_answer_never_increases(self):
        """A wrong answer can only keep or lower difficulty."""
        prev = AdaptiveSignals(difficulty=6, streak=5, ema_performance=0.9)
        self.assertLessEqual(step(prev, False, BOUNDS).difficulty, 6)

    def test_correct_answer_never_decreases(self):
        """A correct answer can only keep or raise difficulty."""
        prev = AdaptiveSignals(difficulty=6, wrong_streak=5, ema_performance=-0.9)
        self.assertGreaterEqual(step(prev, True, BOUNDS).difficulty, 6)

    def test_cooldown_blocks_change(self):
        """While cooling down difficulty holds and the counter drops."""
        prev = AdaptiveSignals(difficulty=4, streak=4, ema_performance=0.8, cooldown=2)
        signals = step(prev, True, BOUNDS)
        self.assertEqual(signals.difficulty, 4)
        self.assertEqual(signals.cooldown, 1)
        self.assertEqual(signals.streak, 5)

    def test_step_changes_by_at_most_one(self):
        """Difficulty never moves by more than one level per answer."""
        signals = AdaptiveSignals(difficulty=5)
        for correct in [True, True, False, True, True, True, False, False, False, True]:
            nxt = step(signals, correct, BOUNDS)
            self.assertLessEqual(abs(nxt.difficulty - signals.difficulty), 1)
            signals = nxt

    def test_clamped_at_upper_bound(self):
        """Difficulty never exceeds the maximum."""
        signals, difficulties = run_answers(AdaptiveSignals(difficulty=9), [True] * 12)
        self.assertEqual(max(difficulties), 10)
        self.assertEqual(signals.difficulty, 10)

    def test_clamped_at_lower_bound(self):
        """Difficulty never drops below the minimum."""
        _, difficulties = run_answers(AdaptiveSignals(difficulty=2), [False] * 12)
        self.assertEqual(min(difficulties), 1)

    def test_out_of_range_difficulty_is_clamped(self):
        """A stored difficulty outside narrowed bounds is pulled back in."""
        bounds = DifficultyBounds(2, 6)
        prev = AdaptiveSignals(difficulty=9, cooldown=1)
        self.assertEqual(step(prev, True, bounds).difficulty, 6)

    def test_input_is_not_mutated(self):
        """The previous signals are left untouched."""
        prev = AdaptiveSignals(difficulty=3, streak=1, ema_performance=0.2)
        step(prev, True, BOUNDS)
        self.assertEqual(prev, AdaptiveSignals(difficulty=3, streak=1, ema_performance=0.2))


class TestDifficultyBounds(unittest.TestCase):
    """Test the DifficultyBounds helpers."""

    def test_clamp(self):
        bounds = DifficultyBounds(2, 8)
        self.assertEqual(bounds.clamp(0), 2)
        self.assertEqual(bounds.clamp(5), 5)
        self.assertEqual(bounds.clamp(11), 8)

    def test_contains(self):
        bounds = DifficultyBounds(2, 8)
        self.assertIn(2, bounds)
        self.assertIn(8, bounds)
        self.assertNotIn(9, bounds)

import unittest

from brainbolt.quiz.scoring import (
    _round_half_up,
    accuracy_factor,
    score_delta,
    streak_multiplier
)


class TestScoreDelta(unittest.TestCase):
    """Test the per-answer scoring function."""

    def test_reference_scenario(self):
        """Difficulty 5, streak 7, 9 of 10 correct scores 91."""
        self.assertEqual(score_delta(True, 5, 7, 10, 9), 91)

    def test_wrong_answer_scores_zero(self):
        """Wrong answers score nothing regardless of the other inputs."""
        for difficulty in (1, 5, 10):
            self.assertEqual(score_delta(False, difficulty, 0, 10, 9), 0)

    def test_first_correct_answer(self):
        """First answer of a session: streak 1, accuracy 1.0."""
        self.assertEqual(score_delta(True, 3, 1, 1, 1), 30)

    def test_monotonic_in_difficulty(self):
        """Harder questions never score less."""
        scores = [score_delta(True, d, 3, 5, 4) for d in range(1, 11)]
        self.assertEqual(scores, sorted(scores))

    def test_monotonic_in_streak(self):
        """Longer streaks never score less."""
        scores = [score_delta(True, 4, s, 20, 15) for s in range(1, 12)]
        self.assertEqual(scores, sorted(scores))

    def test_streak_multiplier_is_capped(self):
        """Streaks beyond seven earn no extra multiplier."""
        self.assertEqual(score_delta(True, 6, 7, 10, 10), score_delta(True, 6, 25, 10, 10))
        self.assertAlmostEqual(streak_multiplier(7), 1.9)
        self.assertAlmostEqual(streak_multiplier(30), 1.9)

    def test_accuracy_factor_range(self):
        """Accuracy factor runs from 0.6 to 1.0 and is 0.6 before any answer."""
        self.assertAlmostEqual(accuracy_factor(0, 0), 0.6)
        self.assertAlmostEqual(accuracy_factor(4, 0), 0.6)
        self.assertAlmostEqual(accuracy_factor(4, 4), 1.0)

    def test_never_negative(self):
        self.assertGreaterEqual(score_delta(True, 1, 0, 1, 0), 0)

    def test_rounds_half_up(self):
        """Halves round up rather than to even."""
        self.assertEqual(_round_half_up(2.5), 3)
        self.assertEqual(_round_half_up(3.5), 4)
        self.assertEqual(_round_half_up(91.2), 91)

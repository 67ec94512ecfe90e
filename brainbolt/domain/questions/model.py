"""
Question Domain Model Module

This module defines the immutable catalog entry served by the quiz engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class Question:
    """
    A question in the catalog.

    Attributes:
        id: Unique identifier for the question
        difficulty: Difficulty level within the catalog range
        prompt: The question text
        choices: Ordered answer choices shown to the user
        correct_answer_hash: SHA-256 hex digest of the normalized correct answer
    """
    id: str
    difficulty: int
    prompt: str
    choices: Tuple[str, ...] = field(default_factory=tuple)
    correct_answer_hash: str = ""

    @classmethod
    def create(cls, id: str, difficulty: int, prompt: str, choices: List[str],
               correct_answer_hash: str) -> 'Question':
        return cls(
            id=str(id),
            difficulty=int(difficulty),
            prompt=prompt,
            choices=tuple(choices or ()),
            correct_answer_hash=correct_answer_hash
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Fields safe to send to a client; the answer digest is left out."""
        return {
            'questionId': self.id,
            'difficulty': self.difficulty,
            'prompt': self.prompt,
            'choices': list(self.choices),
        }

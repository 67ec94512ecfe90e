"""
Question domain module.

This module contains the question model, the catalog contract with its
SQL and in-memory implementations, and the exclusion-aware repository.
"""

from .model import Question
from .catalog import QuestionCatalog, SqlQuestionCatalog
from .memory_catalog import MemoryQuestionCatalog
from .repository import QuestionRepository, RECENT_EXCLUSION_WINDOW, fallback_order

__all__ = [
    'Question',
    'QuestionCatalog',
    'SqlQuestionCatalog',
    'MemoryQuestionCatalog',
    'QuestionRepository',
    'RECENT_EXCLUSION_WINDOW',
    'fallback_order',
]

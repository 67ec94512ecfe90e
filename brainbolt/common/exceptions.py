"""
Common Exception Classes

This module defines the error taxonomy of the quiz engine. Every error a
caller can observe derives from ``BaseError`` and exposes a stable ``kind``
string, so outer layers can map failures without looking at messages.
"""

from typing import Optional, Any


class BaseError(Exception):
    """Base class for all custom exceptions."""

    kind = "internal"

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Error message, safe to show to callers
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class DatabaseError(BaseError):
    """Exception raised for durable-store failures."""

    kind = "database_error"

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(f"Database error: {message}", original_exception)


class ConfigurationError(BaseError):
    """Exception raised for invalid configuration."""

    kind = "configuration_error"

    def __init__(self, message: str, config_key: Optional[str] = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: The configuration key that caused the error
        """
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key


class ValidationError(BaseError):
    """Malformed caller input."""

    kind = "validation_error"

    def __init__(self, message: str, errors: Optional[dict] = None):
        super().__init__(f"Validation error: {message}")
        self.errors = errors or {}


class NotFoundError(BaseError):
    """Exception raised when a resource is not found."""

    kind = "not_found"

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize the not found error.

        Args:
            resource_type: Type of resource that wasn't found
            resource_id: ID of the resource that wasn't found
        """
        super().__init__(f"{resource_type} with ID {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(BaseError):
    """The request conflicts with the current state of a resource."""

    kind = "conflict"


class ExpiredError(BaseError):
    """The referenced resource is absent or past its expiry."""

    kind = "expired"


class ExhaustionError(BaseError):
    """No data exists to satisfy the request; points at a seeding problem."""

    kind = "exhausted"


class QuestionNotFound(NotFoundError):
    """The question record referenced by a request does not exist."""

    kind = "question_not_found"

    def __init__(self, question_id: Any):
        super().__init__("Question", question_id)
        self.question_id = question_id


class QuestionMismatch(ConflictError):
    """The submitted question is not the session's active question."""

    kind = "question_mismatch"

    def __init__(self, session_id: str, question_id: str):
        super().__init__(f"Question {question_id} is not the active question of session {session_id}")
        self.session_id = session_id
        self.question_id = question_id


class DuplicateAnswer(ConflictError):
    """An answer for this (user, session, question) was already recorded."""

    kind = "duplicate_answer"

    def __init__(self, user_id: str, session_id: str, question_id: str,
                 original_exception: Optional[Exception] = None):
        super().__init__(
            f"Answer for question {question_id} in session {session_id} already recorded",
            original_exception
        )
        self.user_id = user_id
        self.session_id = session_id
        self.question_id = question_id


class SessionExpired(ExpiredError):
    """The session does not exist or has expired; a new one must be started."""

    kind = "session_expired"

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} expired")
        self.session_id = session_id


class NoQuestionsAvailable(ExhaustionError):
    """The catalog has no question at any reachable difficulty."""

    kind = "no_questions_available"

    def __init__(self, difficulty: int):
        super().__init__(f"No questions available at difficulty {difficulty}")
        self.difficulty = difficulty

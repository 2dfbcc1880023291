"""Domain errors raised by the service layer.

The HTTP layer maps these onto status codes; services never raise
``HTTPException`` themselves.
"""

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError


class LessonError(Exception):
    """Base class for every error the service layer raises on purpose."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LessonError):
    """Malformed or out-of-range input, detected before touching storage."""

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}


class DuplicateSubmission(LessonError):
    """The student already submitted this quiz or task."""


class NotFound(LessonError):
    """The referenced record does not exist."""


class StorageFailure(LessonError):
    """Any failure reported by the database layer."""


@contextmanager
def storage_errors(action: str):
    """Re-raise SQLAlchemy errors raised inside the block as StorageFailure."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageFailure(f"Failed to {action}") from exc

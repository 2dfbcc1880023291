"""Input validators for lessons, quiz answers, task submissions, and marks.

Pure functions with no I/O. Each returns ``None`` on success and raises
:class:`app.errors.ValidationError` otherwise.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 2000
TASK_CONTENT_MAX_LENGTH = 10000

_url_adapter = TypeAdapter(AnyUrl)


def _is_positive_int(value: Any) -> bool:
    # bool is a subclass of int; True must not pass as id 1
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def _is_valid_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def validate_lesson_input(lesson: Mapping[str, Any]) -> None:
    """Check title, description, video_url and teacher_id of a new lesson."""
    errors: dict[str, str] = {}

    title = lesson.get("title")
    if not isinstance(title, str) or not title.strip():
        errors["title"] = "Title is required and must be a non-empty string"
    elif len(title) > TITLE_MAX_LENGTH:
        errors["title"] = f"Title must not exceed {TITLE_MAX_LENGTH} characters"

    description = lesson.get("description")
    if description is not None and len(str(description)) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = (
            f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters"
        )

    video_url = lesson.get("video_url")
    if video_url and not _is_valid_url(video_url):
        errors["video_url"] = "Video URL must be a valid URL"

    teacher_id = lesson.get("teacher_id")
    if teacher_id is not None and not _is_positive_int(teacher_id):
        errors["teacher_id"] = "Teacher ID must be a positive integer"

    if errors:
        raise ValidationError("Lesson validation failed", errors)


def parse_question_id(key: Any) -> int | None:
    """Interpret an answers-mapping key as a question id, or None if it isn't one."""
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    # int() rejects some isdigit() characters, e.g. "²"
    if isinstance(key, str) and key.strip().isdecimal():
        return int(key)
    return None


def validate_quiz_answer(answers: Any, question_ids: Iterable[int]) -> None:
    """Every answered key must name a question of the lesson."""
    if not isinstance(answers, Mapping):
        raise ValidationError("Answers must be an object", {"answers": "Expected a mapping"})

    known = set(question_ids)
    invalid = [
        str(key) for key in answers if parse_question_id(key) not in known
    ]
    if invalid:
        raise ValidationError(
            f"Invalid question IDs: {', '.join(invalid)}",
            {"answers": f"Unknown question ids: {', '.join(invalid)}"},
        )


def validate_task_submission(content: Any) -> None:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError(
            "Task submission content is required",
            {"content": "Content is required"},
        )
    if len(content) > TASK_CONTENT_MAX_LENGTH:
        raise ValidationError(
            f"Task submission content must not exceed {TASK_CONTENT_MAX_LENGTH} characters",
            {"content": "Content is too long"},
        )


def validate_student_id(student_id: Any) -> None:
    if not _is_positive_int(student_id):
        raise ValidationError(
            "Student ID must be a positive integer", {"student_id": "Invalid student ID"}
        )


def validate_lesson_id(lesson_id: Any) -> None:
    if not _is_positive_int(lesson_id):
        raise ValidationError(
            "Lesson ID must be a positive integer", {"lesson_id": "Invalid lesson ID"}
        )


def validate_record_id(value: Any, field: str) -> None:
    """Positive-integer check for task, attempt and submission ids."""
    if not _is_positive_int(value):
        raise ValidationError(
            f"{field} must be a positive integer", {field: f"Invalid {field}"}
        )


def validate_quiz_mark(score: Any, total_questions: int) -> None:
    """A teacher-assigned quiz score must be an integer in [0, total_questions]."""
    valid = (
        isinstance(score, int)
        and not isinstance(score, bool)
        and 0 <= score <= total_questions
    )
    if not valid:
        raise ValidationError(
            f"Mark must be an integer between 0 and {total_questions}",
            {"score": f"Expected 0..{total_questions}"},
        )

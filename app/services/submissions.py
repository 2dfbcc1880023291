"""Submission service — quiz scoring, task submission, and teacher marks.

At most one QuizAttempt per (lesson, student) and one TaskSubmission per
(task, student) is allowed. The existence check below rejects ordinary
repeats; the unique constraints on both tables reject the concurrent ones,
which surface here as ``IntegrityError`` on commit. Other integrity errors,
such as foreign key violations, are reported as storage failures.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import DuplicateSubmission, NotFound, ValidationError, storage_errors
from app.models.lesson import LessonView
from app.models.quiz import QuizAnswer, QuizAttempt, QuizQuestion
from app.models.task import TaskSubmission
from app.services.validators import (
    parse_question_id,
    validate_lesson_id,
    validate_quiz_answer,
    validate_quiz_mark,
    validate_record_id,
    validate_student_id,
    validate_task_submission,
)

logger = logging.getLogger(__name__)

QUIZ_DUPLICATE_MESSAGE = "Student has already submitted quiz for this lesson"
TASK_DUPLICATE_MESSAGE = "Student has already submitted this task"


def score_answers(
    questions: list[QuizQuestion], answers: Mapping[int, str]
) -> int:
    """Count questions whose given answer exactly equals the correct option."""
    return sum(1 for q in questions if answers.get(q.id) == q.correct_option)


def _normalise_answers(answers: Mapping[Any, Any]) -> dict[int, str]:
    """Key answers by integer question id; values kept as supplied."""
    normalised: dict[int, str] = {}
    for key, value in answers.items():
        question_id = parse_question_id(key)
        if question_id is None or value is None:
            continue
        normalised[question_id] = value if isinstance(value, str) else str(value)
    return normalised


async def _find_attempt(
    db: AsyncSession, lesson_id: int, student_id: int
) -> QuizAttempt | None:
    result = await db.execute(
        select(QuizAttempt)
        .where(QuizAttempt.lesson_id == lesson_id, QuizAttempt.student_id == student_id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _find_submission(
    db: AsyncSession, task_id: int, student_id: int
) -> TaskSubmission | None:
    result = await db.execute(
        select(TaskSubmission)
        .where(TaskSubmission.task_id == task_id, TaskSubmission.student_id == student_id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def submit_quiz(
    db: AsyncSession,
    lesson_id: int,
    student_id: int,
    answers: Mapping[Any, Any],
) -> dict:
    """Score and store a student's quiz answers for a lesson.

    Creates one QuizAttempt and one QuizAnswer per lesson question (an empty
    answer for skipped questions) in a single transaction.

    Returns ``{"id": attempt_id, "score": score}``.

    Raises
    ------
    ValidationError
        Bad ids, or answers naming questions outside the lesson.
    DuplicateSubmission
        The student already has an attempt for this lesson.
    StorageFailure
        Any database error.
    """
    validate_lesson_id(lesson_id)
    validate_student_id(student_id)

    with storage_errors("submit quiz"):
        if await _find_attempt(db, lesson_id, student_id) is not None:
            logger.warning(
                "Rejected duplicate quiz submission lesson=%d student=%d",
                lesson_id, student_id,
            )
            raise DuplicateSubmission(QUIZ_DUPLICATE_MESSAGE)

        result = await db.execute(
            select(QuizQuestion)
            .where(QuizQuestion.lesson_id == lesson_id)
            .order_by(QuizQuestion.id)
        )
        questions = list(result.scalars().all())

        validate_quiz_answer(answers, [q.id for q in questions])
        given = _normalise_answers(answers)
        score = score_answers(questions, given)

        attempt = QuizAttempt(lesson_id=lesson_id, student_id=student_id, score=score)
        db.add(attempt)
        try:
            await db.flush()
            if questions:
                db.add_all(
                    QuizAnswer(
                        attempt_id=attempt.id,
                        question_id=q.id,
                        answer=given.get(q.id, ""),
                    )
                    for q in questions
                )
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            # Not a duplicate unless the row exists, e.g. a foreign key violation
            if await _find_attempt(db, lesson_id, student_id) is None:
                raise
            logger.warning(
                "Concurrent quiz submission lost lesson=%d student=%d",
                lesson_id, student_id,
            )
            raise DuplicateSubmission(QUIZ_DUPLICATE_MESSAGE) from exc
        except SQLAlchemyError:
            # Attempt and answers are written together or not at all
            await db.rollback()
            raise

    logger.info(
        "Quiz submitted lesson=%d student=%d attempt=%d score=%d/%d",
        lesson_id, student_id, attempt.id, score, len(questions),
    )
    return {"id": attempt.id, "score": score}


async def submit_task(
    db: AsyncSession, task_id: int, student_id: int, content: str
) -> dict:
    """Store a student's free-text answer to a lesson task.

    Returns ``{"id": submission_id}``; the mark starts unset.
    """
    validate_record_id(task_id, "task_id")
    validate_student_id(student_id)
    validate_task_submission(content)

    with storage_errors("submit task"):
        if await _find_submission(db, task_id, student_id) is not None:
            logger.warning(
                "Rejected duplicate task submission task=%d student=%d",
                task_id, student_id,
            )
            raise DuplicateSubmission(TASK_DUPLICATE_MESSAGE)

        submission = TaskSubmission(task_id=task_id, student_id=student_id, content=content)
        db.add(submission)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            if await _find_submission(db, task_id, student_id) is None:
                raise
            logger.warning(
                "Concurrent task submission lost task=%d student=%d",
                task_id, student_id,
            )
            raise DuplicateSubmission(TASK_DUPLICATE_MESSAGE) from exc

    logger.info(
        "Task submitted task=%d student=%d submission=%d",
        task_id, student_id, submission.id,
    )
    return {"id": submission.id}


async def mark_task(db: AsyncSession, submission_id: int, mark: int) -> int:
    """Set the teacher's mark on a task submission. Returns the change count."""
    validate_record_id(submission_id, "submission_id")
    if not isinstance(mark, int) or isinstance(mark, bool) or mark < 0:
        raise ValidationError(
            "Mark must be a non-negative integer", {"mark": "Invalid mark"}
        )

    with storage_errors("mark task"):
        submission = await db.get(TaskSubmission, submission_id)
        if submission is None:
            raise NotFound(f"Task submission {submission_id} not found")
        submission.mark = mark
        await db.commit()

    logger.info("Task submission %d marked %d", submission_id, mark)
    return 1


async def mark_quiz(db: AsyncSession, attempt_id: int, score: int) -> int:
    """Override the score of a quiz attempt. Returns the change count.

    The score is bounded by the number of questions in the attempt's lesson.
    """
    validate_record_id(attempt_id, "attempt_id")

    with storage_errors("mark quiz"):
        attempt = await db.get(QuizAttempt, attempt_id)
        if attempt is None:
            raise NotFound(f"Quiz attempt {attempt_id} not found")

        total = (
            await db.execute(
                select(func.count(QuizQuestion.id)).where(
                    QuizQuestion.lesson_id == attempt.lesson_id
                )
            )
        ).scalar() or 0
        validate_quiz_mark(score, total)

        attempt.score = score
        await db.commit()

    logger.info("Quiz attempt %d score overridden to %d", attempt_id, score)
    return 1


async def record_view(db: AsyncSession, lesson_id: int, student_id: int) -> int:
    """Append a LessonView row and return its id."""
    validate_lesson_id(lesson_id)
    validate_student_id(student_id)

    with storage_errors("record view"):
        view = LessonView(lesson_id=lesson_id, student_id=student_id)
        db.add(view)
        await db.commit()

    return view.id

"""Per-student status and per-lesson engagement rollups for teacher review."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import storage_errors
from app.models.lesson import LessonView
from app.models.quiz import QuizAnswer, QuizAttempt
from app.models.student import Student
from app.models.task import LessonTask, TaskSubmission
from app.services.validators import validate_lesson_id, validate_student_id


def attempt_to_dict(attempt: QuizAttempt) -> dict:
    return {
        "id": attempt.id,
        "lesson_id": attempt.lesson_id,
        "student_id": attempt.student_id,
        "submitted_at": attempt.submitted_at,
        "score": attempt.score,
    }


def submission_to_dict(submission: TaskSubmission) -> dict:
    return {
        "id": submission.id,
        "task_id": submission.task_id,
        "student_id": submission.student_id,
        "submitted_at": submission.submitted_at,
        "content": submission.content,
        "mark": submission.mark,
    }


def student_to_dict(student: Student) -> dict:
    return {"id": student.id, "name": student.name, "email": student.email}


def _answer_detail(answer: QuizAnswer) -> dict:
    q = answer.question
    return {
        "id": answer.id,
        "question_id": answer.question_id,
        "answer": answer.answer,
        "question_text": q.question_text if q else None,
        "option_a": q.option_a if q else None,
        "option_b": q.option_b if q else None,
        "option_c": q.option_c if q else None,
        "option_d": q.option_d if q else None,
        "correct_option": q.correct_option if q else None,
    }


def _lesson_submissions_query(lesson_id: int):
    return (
        select(TaskSubmission)
        .join(LessonTask, TaskSubmission.task_id == LessonTask.id)
        .where(LessonTask.lesson_id == lesson_id)
        .order_by(TaskSubmission.id)
    )


async def get_status(db: AsyncSession, lesson_id: int, student_id: int) -> dict:
    """Return ``{"quiz": attempt|None, "task": submission|None}`` for one student.

    ``task`` is the student's first submission (lowest id) to any task of the
    lesson. Lessons with several tasks still report a single submission.
    """
    validate_lesson_id(lesson_id)
    validate_student_id(student_id)

    with storage_errors("fetch status"):
        quiz = (
            await db.execute(
                select(QuizAttempt)
                .where(
                    QuizAttempt.lesson_id == lesson_id,
                    QuizAttempt.student_id == student_id,
                )
                .limit(1)
            )
        ).scalar_one_or_none()
        task = (
            await db.execute(
                _lesson_submissions_query(lesson_id)
                .where(TaskSubmission.student_id == student_id)
                .limit(1)
            )
        ).scalar_one_or_none()

    return {
        "quiz": attempt_to_dict(quiz) if quiz else None,
        "task": submission_to_dict(task) if task else None,
    }


async def get_attempts(db: AsyncSession, lesson_id: int) -> list[dict]:
    """Every quiz attempt for a lesson with student name and graded answers.

    Includes each question's correct option so a teacher can regrade.
    """
    validate_lesson_id(lesson_id)

    with storage_errors("fetch attempts"):
        result = await db.execute(
            select(QuizAttempt)
            .where(QuizAttempt.lesson_id == lesson_id)
            .options(
                selectinload(QuizAttempt.student),
                selectinload(QuizAttempt.answers).selectinload(QuizAnswer.question),
            )
            .order_by(QuizAttempt.id)
        )
        attempts = result.scalars().all()

    return [
        {
            **attempt_to_dict(a),
            "student_name": a.student.name if a.student else None,
            "answers": [_answer_detail(ans) for ans in a.answers],
        }
        for a in attempts
    ]


async def get_submissions(db: AsyncSession, lesson_id: int) -> list[dict]:
    """Every task submission for any task of a lesson, with student name."""
    validate_lesson_id(lesson_id)

    with storage_errors("fetch submissions"):
        result = await db.execute(
            _lesson_submissions_query(lesson_id).options(
                selectinload(TaskSubmission.student)
            )
        )
        submissions = result.scalars().all()

    return [
        {
            **submission_to_dict(s),
            "student_name": s.student.name if s.student else None,
        }
        for s in submissions
    ]


async def get_engagement(db: AsyncSession, lesson_id: int) -> list[dict]:
    """One row per student in the system: viewed flag, quiz attempt, task submission.

    Uses one query per record kind instead of per-student lookups; each
    student's quiz/task is the lowest-id match, same as :func:`get_status`.
    """
    validate_lesson_id(lesson_id)

    with storage_errors("fetch engagement"):
        students = (
            await db.execute(select(Student).order_by(Student.id))
        ).scalars().all()

        viewed_ids = set(
            (
                await db.execute(
                    select(LessonView.student_id)
                    .where(LessonView.lesson_id == lesson_id)
                    .distinct()
                )
            ).scalars().all()
        )

        attempts = (
            await db.execute(
                select(QuizAttempt)
                .where(QuizAttempt.lesson_id == lesson_id)
                .order_by(QuizAttempt.id)
            )
        ).scalars().all()

        submissions = (
            await db.execute(_lesson_submissions_query(lesson_id))
        ).scalars().all()

    # Keep the first (lowest id) record per student
    attempt_by_student: dict[int, QuizAttempt] = {}
    for a in attempts:
        attempt_by_student.setdefault(a.student_id, a)
    submission_by_student: dict[int, TaskSubmission] = {}
    for s in submissions:
        submission_by_student.setdefault(s.student_id, s)

    rows = []
    for student in students:
        quiz = attempt_by_student.get(student.id)
        task = submission_by_student.get(student.id)
        rows.append({
            "student": student_to_dict(student),
            "viewed": student.id in viewed_ids,
            "quiz": attempt_to_dict(quiz) if quiz else None,
            "task": submission_to_dict(task) if task else None,
        })
    return rows

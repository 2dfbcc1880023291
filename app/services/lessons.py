"""Lesson catalogue — listing, detail, creation, and the user roster."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import NotFound, ValidationError, storage_errors
from app.models.lesson import Lesson, LessonView
from app.models.quiz import OPTION_LETTERS, QuizAttempt, QuizQuestion
from app.models.student import Student
from app.models.task import LessonTask
from app.models.teacher import Teacher
from app.services.status import student_to_dict
from app.services.validators import validate_lesson_id, validate_lesson_input

logger = logging.getLogger(__name__)


def _lesson_to_dict(lesson: Lesson, viewed_count: int = 0, quiz_count: int = 0) -> dict:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "video_url": lesson.video_url,
        "teacher_id": lesson.teacher_id,
        "teacher_name": lesson.teacher.name if lesson.teacher else None,
        "published_at": lesson.published_at,
        "viewed_count": viewed_count,
        "quiz_count": quiz_count,
    }


async def list_lessons(db: AsyncSession) -> list[dict]:
    """All lessons with teacher name, view count and quiz attempt count."""
    views = (
        select(LessonView.lesson_id, func.count(LessonView.id).label("n"))
        .group_by(LessonView.lesson_id)
        .subquery()
    )
    attempts = (
        select(QuizAttempt.lesson_id, func.count(QuizAttempt.id).label("n"))
        .group_by(QuizAttempt.lesson_id)
        .subquery()
    )
    with storage_errors("fetch lessons"):
        result = await db.execute(
            select(Lesson, views.c.n, attempts.c.n)
            .outerjoin(views, views.c.lesson_id == Lesson.id)
            .outerjoin(attempts, attempts.c.lesson_id == Lesson.id)
            .options(selectinload(Lesson.teacher))
            .order_by(Lesson.id)
        )
        rows = result.all()

    return [
        _lesson_to_dict(lesson, viewed_count or 0, quiz_count or 0)
        for lesson, viewed_count, quiz_count in rows
    ]


async def get_lesson(db: AsyncSession, lesson_id: int) -> dict:
    """Lesson with its questions and tasks, as shown to students.

    Questions omit ``correct_option``.
    """
    validate_lesson_id(lesson_id)

    with storage_errors("fetch lesson detail"):
        result = await db.execute(
            select(Lesson)
            .where(Lesson.id == lesson_id)
            .options(
                selectinload(Lesson.teacher),
                selectinload(Lesson.questions),
                selectinload(Lesson.tasks),
            )
        )
        lesson = result.scalar_one_or_none()
    if lesson is None:
        raise NotFound(f"Lesson {lesson_id} not found")

    return {
        "lesson": _lesson_to_dict(lesson),
        "questions": [
            {
                "id": q.id,
                "question_text": q.question_text,
                "option_a": q.option_a,
                "option_b": q.option_b,
                "option_c": q.option_c,
                "option_d": q.option_d,
            }
            for q in lesson.questions
        ],
        "tasks": [{"id": t.id, "task_text": t.task_text} for t in lesson.tasks],
    }


def _check_questions(questions: list[dict[str, Any]]) -> None:
    errors: dict[str, str] = {}
    for i, q in enumerate(questions):
        if not str(q.get("question_text") or "").strip():
            errors[f"questions[{i}].question_text"] = "Question text is required"
        if q.get("correct_option") not in OPTION_LETTERS:
            errors[f"questions[{i}].correct_option"] = "Must be one of a, b, c, d"
    if errors:
        raise ValidationError("Quiz question validation failed", errors)


async def create_lesson(db: AsyncSession, data: dict[str, Any]) -> int:
    """Publish a lesson with optional quiz questions and tasks; returns its id."""
    validate_lesson_input(data)
    questions = data.get("questions") or []
    tasks = data.get("tasks") or []
    _check_questions(questions)

    with storage_errors("create lesson"):
        lesson = Lesson(
            title=data["title"].strip(),
            description=data.get("description"),
            video_url=data.get("video_url"),
            teacher_id=data.get("teacher_id"),
        )
        lesson.questions = [
            QuizQuestion(
                question_text=q["question_text"],
                option_a=q.get("option_a"),
                option_b=q.get("option_b"),
                option_c=q.get("option_c"),
                option_d=q.get("option_d"),
                correct_option=q["correct_option"],
            )
            for q in questions
        ]
        lesson.tasks = [LessonTask(task_text=t) for t in tasks if str(t).strip()]
        db.add(lesson)
        await db.commit()

    logger.info(
        "Lesson %d created: %s (%d questions, %d tasks)",
        lesson.id, lesson.title, len(lesson.questions), len(lesson.tasks),
    )
    return lesson.id


async def list_users(db: AsyncSession) -> dict:
    with storage_errors("fetch users"):
        students = (await db.execute(select(Student).order_by(Student.id))).scalars().all()
        teachers = (await db.execute(select(Teacher).order_by(Teacher.id))).scalars().all()

    return {
        "students": [student_to_dict(s) for s in students],
        "teachers": [{"id": t.id, "name": t.name, "email": t.email} for t in teachers],
    }

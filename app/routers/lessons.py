"""Lesson API routes — catalogue, student submissions, and teacher review."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import require_teacher
from app.models.teacher import Teacher
from app.services import lessons, status, submissions

router = APIRouter(prefix="/api/lessons", tags=["lessons"])


class QuestionIn(BaseModel):
    question_text: str
    option_a: str | None = None
    option_b: str | None = None
    option_c: str | None = None
    option_d: str | None = None
    correct_option: str


class LessonCreateRequest(BaseModel):
    title: str
    description: str | None = None
    video_url: str | None = None
    teacher_id: int | None = None
    questions: list[QuestionIn] = Field(default_factory=list)
    tasks: list[str] = Field(default_factory=list)


class IdResponse(BaseModel):
    id: int


class ViewRequest(BaseModel):
    lesson_id: int
    student_id: int


class QuizSubmitRequest(BaseModel):
    lesson_id: int
    student_id: int
    # Keys are question ids; JSON object keys always arrive as strings
    answers: dict[str, str | None] = Field(default_factory=dict)


class QuizSubmitResponse(BaseModel):
    id: int
    score: int


class TaskSubmitRequest(BaseModel):
    task_id: int
    student_id: int
    content: str


class QuizMarkRequest(BaseModel):
    attempt_id: int
    score: int


class TaskMarkRequest(BaseModel):
    submission_id: int
    mark: int


class ChangesResponse(BaseModel):
    changes: int


class AttemptOut(BaseModel):
    id: int
    lesson_id: int
    student_id: int
    submitted_at: datetime
    score: int


class SubmissionOut(BaseModel):
    id: int
    task_id: int
    student_id: int
    submitted_at: datetime
    content: str
    mark: int | None


class StatusResponse(BaseModel):
    quiz: AttemptOut | None
    task: SubmissionOut | None


@router.get("")
async def list_lessons(db: AsyncSession = Depends(get_db)):
    """All published lessons with view and attempt counts."""
    return await lessons.list_lessons(db)


@router.post("", response_model=IdResponse)
async def create_lesson(
    body: LessonCreateRequest,
    teacher: Teacher = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """Publish a lesson; defaults the owner to the calling teacher."""
    data = body.model_dump()
    if data["teacher_id"] is None:
        data["teacher_id"] = teacher.id
    lesson_id = await lessons.create_lesson(db, data)
    return IdResponse(id=lesson_id)


@router.post("/view", response_model=IdResponse)
async def record_view(body: ViewRequest, db: AsyncSession = Depends(get_db)):
    view_id = await submissions.record_view(db, body.lesson_id, body.student_id)
    return IdResponse(id=view_id)


@router.post("/quiz/submit", response_model=QuizSubmitResponse)
async def submit_quiz(body: QuizSubmitRequest, db: AsyncSession = Depends(get_db)):
    """Score and store a student's quiz answers."""
    result = await submissions.submit_quiz(
        db, body.lesson_id, body.student_id, body.answers
    )
    return QuizSubmitResponse(**result)


@router.post("/task/submit", response_model=IdResponse)
async def submit_task(body: TaskSubmitRequest, db: AsyncSession = Depends(get_db)):
    result = await submissions.submit_task(
        db, body.task_id, body.student_id, body.content
    )
    return IdResponse(**result)


@router.post("/quiz/mark", response_model=ChangesResponse)
async def mark_quiz(
    body: QuizMarkRequest,
    teacher: Teacher = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """Teacher override of a quiz attempt's score."""
    changes = await submissions.mark_quiz(db, body.attempt_id, body.score)
    return ChangesResponse(changes=changes)


@router.post("/task/mark", response_model=ChangesResponse)
async def mark_task(
    body: TaskMarkRequest,
    teacher: Teacher = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    changes = await submissions.mark_task(db, body.submission_id, body.mark)
    return ChangesResponse(changes=changes)


@router.get("/{lesson_id}")
async def lesson_detail(lesson_id: int, db: AsyncSession = Depends(get_db)):
    """Lesson with questions (without answers) and tasks."""
    return await lessons.get_lesson(db, lesson_id)


@router.get("/{lesson_id}/status", response_model=StatusResponse)
async def lesson_status(
    lesson_id: int,
    student_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Whether a student has submitted the quiz and task of a lesson."""
    return await status.get_status(db, lesson_id, student_id)


@router.get("/{lesson_id}/attempts")
async def lesson_attempts(
    lesson_id: int,
    teacher: Teacher = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """Quiz attempts with per-question answers and correct options."""
    return await status.get_attempts(db, lesson_id)


@router.get("/{lesson_id}/submissions")
async def lesson_submissions(
    lesson_id: int,
    teacher: Teacher = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    return await status.get_submissions(db, lesson_id)

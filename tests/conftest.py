"""Shared pytest fixtures for the lessons test suite."""

from collections.abc import AsyncGenerator

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base, create_engine, create_session_factory, get_db
from app.models import (
    Lesson,
    LessonTask,
    QuizQuestion,
    Student,
    Teacher,
)
from main import app

# ---------------------------------------------------------------------------
# Async engine & session fixtures (in-memory SQLite)
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def async_engine():
    """Create a fresh in-memory async engine per test."""
    engine = create_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session that rolls back after each test."""
    session_factory = create_session_factory(async_engine)
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture()
async def fk_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory database that enforces foreign keys."""
    engine = create_engine(TEST_DATABASE_URL)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with create_session_factory(engine)() as session:
        yield session
        await session.rollback()
    await engine.dispose()


@pytest.fixture()
async def client(
    async_engine, db_session: AsyncSession
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTPX async client wired to the FastAPI app with test DB override."""

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.state.session_factory = create_session_factory(async_engine)

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.session_factory = None


# ---------------------------------------------------------------------------
# Convenience / data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
async def classroom(db_session: AsyncSession) -> dict:
    """Three students, one teacher, and a lesson with three questions and a task.

    Question correct options are 'a', 'b', 'c' in id order.
    """
    students = [
        Student(name="Alice Johnson", email="alice@example.com"),
        Student(name="Bob Smith", email="bob@example.com"),
        Student(name="Charlie Lee", email="charlie@example.com"),
    ]
    teacher = Teacher(name="Mrs Green", email="green@example.com")
    db_session.add_all(students)
    db_session.add(teacher)
    await db_session.flush()

    lesson = Lesson(
        title="Quadratics",
        description="Introduction to quadratic equations",
        video_url="https://example.com/quadratics.mp4",
        teacher_id=teacher.id,
    )
    lesson.questions = [
        QuizQuestion(
            question_text=f"Question {i}",
            option_a="A", option_b="B", option_c="C", option_d="D",
            correct_option=correct,
        )
        for i, correct in enumerate(("a", "b", "c"), start=1)
    ]
    lesson.tasks = [LessonTask(task_text="Explain the quadratic formula.")]
    empty_lesson = Lesson(title="Announcements", teacher_id=teacher.id)
    db_session.add_all([lesson, empty_lesson])
    await db_session.commit()

    return {
        "students": students,
        "teacher": teacher,
        "lesson": lesson,
        "questions": list(lesson.questions),
        "task": lesson.tasks[0],
        "empty_lesson": empty_lesson,
    }


@pytest.fixture()
def teacher_headers(classroom) -> dict[str, str]:
    """Auth proxy header identifying the classroom teacher."""
    return {"x-user-email": classroom["teacher"].email}

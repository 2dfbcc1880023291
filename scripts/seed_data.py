"""Seed the database with demo students, teachers and lessons.

Usage: python scripts/seed_data.py
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from app.config import settings
from app.database import create_engine, create_session_factory, init_db
from app.models.lesson import Lesson
from app.models.quiz import QuizQuestion
from app.models.student import Student
from app.models.task import LessonTask
from app.models.teacher import Teacher


SEED_STUDENTS = [
    {"name": "Alice Johnson", "email": "alice@example.com"},
    {"name": "Bob Smith", "email": "bob@example.com"},
    {"name": "Charlie Lee", "email": "charlie@example.com"},
]

SEED_TEACHERS = [
    {"name": "Mrs Green", "email": "green@example.com"},
    {"name": "Mr Brown", "email": "brown@example.com"},
]

SEED_LESSONS = [
    {
        "title": "Quadratics",
        "description": "Introduction to quadratic equations",
        "video_url": "https://www.youtube.com/watch?v=UZTvYYoOrmI",
        "teacher_email": "green@example.com",
        "questions": [
            ("What is the degree of a quadratic?", "1", "2", "3", "4", "b"),
            ("Roots of x^2 - 4 = 0?", "±1", "±4", "±2", "0", "c"),
        ],
        "tasks": ["Solve x^2 - 5x + 6 = 0 and explain each step."],
    },
    {
        "title": "Forces",
        "description": "Newton's laws of motion",
        "video_url": "https://www.youtube.com/watch?v=kKKM8Y-u7ds",
        "teacher_email": "brown@example.com",
        "questions": [
            ("Unit of force?", "Joule", "Watt", "Pascal", "Newton", "d"),
        ],
        "tasks": ["Describe an everyday example of Newton's third law."],
    },
]


async def _get_or_create(session, model, **fields):
    # Names are not unique, so match on the whole record (idempotent)
    result = await session.execute(select(model).filter_by(**fields).limit(1))
    existing = result.scalar_one_or_none()
    if existing:
        print(f"  Exists: {model.__name__} {fields['name']}")
        return existing
    record = model(**fields)
    session.add(record)
    await session.flush()
    print(f"  Inserted: {model.__name__} {fields['name']}")
    return record


async def seed() -> None:
    # Ensure data directory exists
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)

    engine = create_engine(settings.DATABASE_URL)
    await init_db(engine)
    print("Database tables created.")

    session_factory = create_session_factory(engine)
    async with session_factory() as session:
        for data in SEED_STUDENTS:
            await _get_or_create(session, Student, **data)

        teachers = {}
        for data in SEED_TEACHERS:
            teachers[data["email"]] = await _get_or_create(session, Teacher, **data)

        for data in SEED_LESSONS:
            result = await session.execute(
                select(Lesson).where(Lesson.title == data["title"])
            )
            if result.scalar_one_or_none():
                print(f"  Exists: Lesson {data['title']}")
                continue

            lesson = Lesson(
                title=data["title"],
                description=data["description"],
                video_url=data["video_url"],
                teacher_id=teachers[data["teacher_email"]].id,
            )
            lesson.questions = [
                QuizQuestion(
                    question_text=text,
                    option_a=a,
                    option_b=b,
                    option_c=c,
                    option_d=d,
                    correct_option=correct,
                )
                for text, a, b, c, d, correct in data["questions"]
            ]
            lesson.tasks = [LessonTask(task_text=t) for t in data["tasks"]]
            session.add(lesson)
            print(f"  Inserted: Lesson {data['title']}")

        await session.commit()

    await engine.dispose()
    print("Seed data complete.")


if __name__ == "__main__":
    asyncio.run(seed())

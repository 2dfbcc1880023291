"""Lesson and LessonView ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String, nullable=True)
    teacher_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("teachers.id"), nullable=True
    )
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    teacher: Mapped["Teacher"] = relationship("Teacher", back_populates="lessons")
    questions: Mapped[list["QuizQuestion"]] = relationship(
        "QuizQuestion", back_populates="lesson", order_by="QuizQuestion.id"
    )
    tasks: Mapped[list["LessonTask"]] = relationship(
        "LessonTask", back_populates="lesson", order_by="LessonTask.id"
    )
    views: Mapped[list["LessonView"]] = relationship("LessonView", back_populates="lesson")


class LessonView(Base):
    """Append-only record of a student opening a lesson."""

    __tablename__ = "lesson_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id"), nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    viewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="views")
    student: Mapped["Student"] = relationship("Student", back_populates="lesson_views")

"""LessonTask and TaskSubmission ORM models."""

from datetime import datetime, timezone

from sqlalchemy import Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class LessonTask(Base):
    __tablename__ = "lesson_tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id"), nullable=False
    )
    task_text: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="tasks")
    submissions: Mapped[list["TaskSubmission"]] = relationship(
        "TaskSubmission", back_populates="task"
    )


class TaskSubmission(Base):
    __tablename__ = "task_submissions"
    __table_args__ = (
        UniqueConstraint("task_id", "student_id", name="uq_task_submission_task_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lesson_tasks.id"), nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    mark: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    task: Mapped["LessonTask"] = relationship("LessonTask", back_populates="submissions")
    student: Mapped["Student"] = relationship("Student", back_populates="task_submissions")

"""Student ORM model."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    quiz_attempts: Mapped[list["QuizAttempt"]] = relationship(
        "QuizAttempt", back_populates="student"
    )
    task_submissions: Mapped[list["TaskSubmission"]] = relationship(
        "TaskSubmission", back_populates="student"
    )
    lesson_views: Mapped[list["LessonView"]] = relationship(
        "LessonView", back_populates="student"
    )

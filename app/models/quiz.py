"""Quiz ORM models: questions, attempts, and per-question answers."""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

OPTION_LETTERS = ("a", "b", "c", "d")


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id"), nullable=False
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    option_a: Mapped[str | None] = mapped_column(String, nullable=True)
    option_b: Mapped[str | None] = mapped_column(String, nullable=True)
    option_c: Mapped[str | None] = mapped_column(String, nullable=True)
    option_d: Mapped[str | None] = mapped_column(String, nullable=True)
    correct_option: Mapped[str] = mapped_column(String(1), nullable=False)

    # Relationships
    lesson: Mapped["Lesson"] = relationship("Lesson", back_populates="questions")


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        UniqueConstraint("lesson_id", "student_id", name="uq_quiz_attempt_lesson_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lesson_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lessons.id"), nullable=False
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    student: Mapped["Student"] = relationship("Student", back_populates="quiz_attempts")
    answers: Mapped[list["QuizAnswer"]] = relationship(
        "QuizAnswer", back_populates="attempt", order_by="QuizAnswer.id"
    )


class QuizAnswer(Base):
    __tablename__ = "quiz_answers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attempt_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quiz_attempts.id"), nullable=False
    )
    question_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quiz_questions.id"), nullable=False
    )
    # Empty string when the student skipped the question
    answer: Mapped[str] = mapped_column(String, nullable=False, default="")

    # Relationships
    attempt: Mapped["QuizAttempt"] = relationship("QuizAttempt", back_populates="answers")
    question: Mapped["QuizQuestion"] = relationship("QuizQuestion")

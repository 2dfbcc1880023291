"""ORM models package - exports all models and Base."""

from app.database import Base
from app.models.student import Student
from app.models.teacher import Teacher
from app.models.lesson import Lesson, LessonView
from app.models.quiz import QuizQuestion, QuizAttempt, QuizAnswer
from app.models.task import LessonTask, TaskSubmission

__all__ = [
    "Base",
    "Student",
    "Teacher",
    "Lesson",
    "LessonView",
    "QuizQuestion",
    "QuizAttempt",
    "QuizAnswer",
    "LessonTask",
    "TaskSubmission",
]

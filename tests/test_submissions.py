"""Quiz scoring, duplicate guards, and teacher marks."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import DuplicateSubmission, NotFound, StorageFailure, ValidationError
from app.models import LessonView, QuizAnswer, QuizAttempt, TaskSubmission
from app.services import submissions


async def _count(db, model, *where):
    return (await db.execute(select(func.count(model.id)).where(*where))).scalar()


def _miss_once(find):
    """Wrap a lookup so its first call reports nothing, as if a request raced it."""
    calls = []

    async def wrapper(*args):
        calls.append(args)
        if len(calls) == 1:
            return None
        return await find(*args)

    return wrapper


# ---------------------------------------------------------------------------
# submit_quiz
# ---------------------------------------------------------------------------


async def test_submit_quiz_scores_and_records_every_answer(db_session, classroom):
    lesson = classroom["lesson"]
    student = classroom["students"][0]
    q1, q2, q3 = classroom["questions"]

    result = await submissions.submit_quiz(
        db_session, lesson.id, student.id, {q1.id: "a", q2.id: "c", q3.id: "c"}
    )

    assert result["score"] == 2
    answers = (
        await db_session.execute(
            select(QuizAnswer)
            .where(QuizAnswer.attempt_id == result["id"])
            .order_by(QuizAnswer.question_id)
        )
    ).scalars().all()
    assert [(a.question_id, a.answer) for a in answers] == [
        (q1.id, "a"), (q2.id, "c"), (q3.id, "c"),
    ]
    attempt = await db_session.get(QuizAttempt, result["id"])
    assert attempt.score == 2
    assert attempt.submitted_at is not None


async def test_submit_quiz_accepts_string_keys(db_session, classroom):
    q1, q2, q3 = classroom["questions"]
    result = await submissions.submit_quiz(
        db_session,
        classroom["lesson"].id,
        classroom["students"][0].id,
        {str(q1.id): "a", str(q2.id): "b", str(q3.id): "c"},
    )
    assert result["score"] == 3


async def test_submit_quiz_is_case_sensitive(db_session, classroom):
    q1, q2, q3 = classroom["questions"]
    result = await submissions.submit_quiz(
        db_session,
        classroom["lesson"].id,
        classroom["students"][0].id,
        {q1.id: "A", q2.id: "B", q3.id: "c"},
    )
    assert result["score"] == 1


async def test_submit_quiz_stores_blank_for_skipped_questions(db_session, classroom):
    q1, q2, q3 = classroom["questions"]
    result = await submissions.submit_quiz(
        db_session, classroom["lesson"].id, classroom["students"][1].id, {q2.id: "b"}
    )

    assert result["score"] == 1
    answers = (
        await db_session.execute(
            select(QuizAnswer.question_id, QuizAnswer.answer)
            .where(QuizAnswer.attempt_id == result["id"])
            .order_by(QuizAnswer.question_id)
        )
    ).all()
    assert answers == [(q1.id, ""), (q2.id, "b"), (q3.id, "")]


async def test_submit_quiz_zero_question_lesson(db_session, classroom):
    result = await submissions.submit_quiz(
        db_session, classroom["empty_lesson"].id, classroom["students"][0].id, {}
    )

    assert result["score"] == 0
    assert await _count(db_session, QuizAttempt) == 1
    assert await _count(db_session, QuizAnswer) == 0


async def test_second_quiz_submission_is_rejected(db_session, classroom):
    lesson = classroom["lesson"]
    student = classroom["students"][0]
    q1 = classroom["questions"][0]

    first = await submissions.submit_quiz(db_session, lesson.id, student.id, {q1.id: "b"})
    with pytest.raises(DuplicateSubmission, match="already submitted quiz"):
        await submissions.submit_quiz(db_session, lesson.id, student.id, {q1.id: "a"})

    assert await _count(
        db_session, QuizAttempt,
        QuizAttempt.lesson_id == lesson.id, QuizAttempt.student_id == student.id,
    ) == 1
    assert (await db_session.get(QuizAttempt, first["id"])).score == 0
    assert await _count(db_session, QuizAnswer) == 3


async def test_quiz_race_is_closed_by_unique_constraint(db_session, classroom, monkeypatch):
    lesson = classroom["lesson"]
    student = classroom["students"][0]
    await submissions.submit_quiz(db_session, lesson.id, student.id, {})

    # Simulate a concurrent request that passed the existence check
    monkeypatch.setattr(
        submissions, "_find_attempt", _miss_once(submissions._find_attempt)
    )
    with pytest.raises(DuplicateSubmission):
        await submissions.submit_quiz(db_session, lesson.id, student.id, {})

    assert await _count(db_session, QuizAttempt) == 1
    assert await _count(db_session, QuizAnswer) == 3


async def test_quiz_submission_is_atomic(db_session, classroom, monkeypatch):
    async def _failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(AsyncSession, "commit", _failing_commit)
    with pytest.raises(StorageFailure):
        await submissions.submit_quiz(
            db_session, classroom["lesson"].id, classroom["students"][0].id, {}
        )
    monkeypatch.undo()

    assert await _count(db_session, QuizAttempt) == 0
    assert await _count(db_session, QuizAnswer) == 0


async def test_submit_quiz_rejects_foreign_question_ids(db_session, classroom):
    with pytest.raises(ValidationError, match="Invalid question IDs: 999"):
        await submissions.submit_quiz(
            db_session, classroom["lesson"].id, classroom["students"][0].id, {999: "a"}
        )
    assert await _count(db_session, QuizAttempt) == 0


async def test_submit_quiz_rejects_bad_ids(db_session):
    with pytest.raises(ValidationError):
        await submissions.submit_quiz(db_session, 0, 1, {})
    with pytest.raises(ValidationError):
        await submissions.submit_quiz(db_session, 1, -1, {})


# ---------------------------------------------------------------------------
# submit_task
# ---------------------------------------------------------------------------


async def test_submit_task_creates_unmarked_submission(db_session, classroom):
    task = classroom["task"]
    student = classroom["students"][0]

    result = await submissions.submit_task(db_session, task.id, student.id, "My answer")

    submission = await db_session.get(TaskSubmission, result["id"])
    assert submission.content == "My answer"
    assert submission.mark is None
    assert submission.submitted_at is not None


async def test_second_task_submission_leaves_original_untouched(db_session, classroom):
    task = classroom["task"]
    student = classroom["students"][0]
    first = await submissions.submit_task(db_session, task.id, student.id, "first")

    with pytest.raises(DuplicateSubmission, match="already submitted this task"):
        await submissions.submit_task(db_session, task.id, student.id, "second")

    rows = (
        await db_session.execute(
            select(TaskSubmission).where(TaskSubmission.student_id == student.id)
        )
    ).scalars().all()
    assert [(s.id, s.content) for s in rows] == [(first["id"], "first")]


async def test_task_race_is_closed_by_unique_constraint(db_session, classroom, monkeypatch):
    task = classroom["task"]
    student = classroom["students"][0]
    await submissions.submit_task(db_session, task.id, student.id, "first")

    monkeypatch.setattr(
        submissions, "_find_submission", _miss_once(submissions._find_submission)
    )
    with pytest.raises(DuplicateSubmission):
        await submissions.submit_task(db_session, task.id, student.id, "second")
    assert await _count(db_session, TaskSubmission) == 1


@pytest.mark.parametrize("content", ["", "   ", "x" * 10001])
async def test_submit_task_validates_content(db_session, classroom, content):
    with pytest.raises(ValidationError):
        await submissions.submit_task(
            db_session, classroom["task"].id, classroom["students"][0].id, content
        )
    assert await _count(db_session, TaskSubmission) == 0


async def test_quiz_missing_lesson_is_storage_failure_not_duplicate(fk_db_session):
    with pytest.raises(StorageFailure):
        await submissions.submit_quiz(fk_db_session, 777, 1, {})
    assert await _count(fk_db_session, QuizAttempt) == 0


async def test_task_missing_task_is_storage_failure_not_duplicate(fk_db_session):
    with pytest.raises(StorageFailure):
        await submissions.submit_task(fk_db_session, 777, 1, "hello")
    assert await _count(fk_db_session, TaskSubmission) == 0


async def test_submit_quiz_rejects_non_decimal_digit_key(db_session, classroom):
    with pytest.raises(ValidationError, match="Invalid question IDs: ²"):
        await submissions.submit_quiz(
            db_session, classroom["lesson"].id, classroom["students"][0].id, {"²": "a"}
        )
    assert await _count(db_session, QuizAttempt) == 0


# ---------------------------------------------------------------------------
# marks
# ---------------------------------------------------------------------------


async def test_mark_task_updates_mark(db_session, classroom):
    sub = await submissions.submit_task(
        db_session, classroom["task"].id, classroom["students"][0].id, "answer"
    )

    assert await submissions.mark_task(db_session, sub["id"], 8) == 1
    assert (await db_session.get(TaskSubmission, sub["id"])).mark == 8


async def test_mark_quiz_overrides_score(db_session, classroom):
    attempt = await submissions.submit_quiz(
        db_session, classroom["lesson"].id, classroom["students"][0].id, {}
    )

    assert await submissions.mark_quiz(db_session, attempt["id"], 3) == 1
    assert (await db_session.get(QuizAttempt, attempt["id"])).score == 3


async def test_mark_quiz_rejects_score_above_question_count(db_session, classroom):
    attempt = await submissions.submit_quiz(
        db_session, classroom["lesson"].id, classroom["students"][0].id, {}
    )
    with pytest.raises(ValidationError, match="between 0 and 3"):
        await submissions.mark_quiz(db_session, attempt["id"], 4)
    with pytest.raises(ValidationError):
        await submissions.mark_quiz(db_session, attempt["id"], -1)


async def test_marks_on_missing_records_raise_not_found(db_session, classroom):
    with pytest.raises(NotFound):
        await submissions.mark_task(db_session, 9999, 5)
    with pytest.raises(NotFound):
        await submissions.mark_quiz(db_session, 9999, 1)


async def test_mark_task_rejects_negative_mark(db_session, classroom):
    with pytest.raises(ValidationError):
        await submissions.mark_task(db_session, 1, -3)


# ---------------------------------------------------------------------------
# record_view
# ---------------------------------------------------------------------------


async def test_record_view_appends(db_session, classroom):
    lesson = classroom["lesson"]
    student = classroom["students"][2]

    first = await submissions.record_view(db_session, lesson.id, student.id)
    second = await submissions.record_view(db_session, lesson.id, student.id)

    assert first != second
    assert await _count(db_session, LessonView) == 2

"""Teacher review routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import require_teacher
from app.models.teacher import Teacher
from app.services.status import get_engagement

router = APIRouter(prefix="/api/teacher", tags=["teacher"])


@router.get("/lessons/{lesson_id}/engagement")
async def lesson_engagement(
    lesson_id: int,
    teacher: Teacher = Depends(require_teacher),
    db: AsyncSession = Depends(get_db),
):
    """Viewed / quiz / task state of every student for one lesson."""
    return await get_engagement(db, lesson_id)

"""FastAPI dependencies for route handlers."""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.teacher import Teacher
from app.services.auth import get_caller_email, get_teacher_by_email


async def require_teacher(
    request: Request, db: AsyncSession = Depends(get_db)
) -> Teacher:
    """Require an authenticated caller registered as a teacher."""
    email = get_caller_email(request.headers)
    if not email:
        raise HTTPException(status_code=401, detail="Not authenticated")
    teacher = await get_teacher_by_email(db, email)
    if teacher is None:
        raise HTTPException(status_code=403, detail="Teacher access required")
    return teacher

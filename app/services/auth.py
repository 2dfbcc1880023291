"""Caller identity - proxy header parsing + teacher lookup."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.teacher import Teacher


async def get_teacher_by_email(db: AsyncSession, email: str) -> Teacher | None:
    """Look up a teacher by email (first match; emails are not unique)."""
    result = await db.execute(
        select(Teacher).where(Teacher.email == email).order_by(Teacher.id).limit(1)
    )
    return result.scalar_one_or_none()


def get_caller_email(headers) -> str | None:
    """Extract the authenticated email from the auth proxy header."""
    email = (headers.get(settings.AUTH_HEADER) or "").strip()
    return email or None

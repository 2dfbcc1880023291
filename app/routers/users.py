"""User roster routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.lessons import list_users

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def users(db: AsyncSession = Depends(get_db)):
    """All students and teachers."""
    return await list_users(db)

"""Service layer - domain logic over an AsyncSession, free of HTTP concerns."""

from app.services import lessons, status, submissions, validators

__all__ = ["lessons", "status", "submissions", "validators"]

"""
User Repository

Lookup and creation of users for the authentication flow. The magic link
components never touch the user table directly; they go through this
repository, which route handlers receive as a FastAPI dependency.
"""

from typing import Optional, Union
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.models.user import User


class UserRepository:
    """Async data access for User rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find a user by email address (exact, case-sensitive match)."""
        return await self.db.scalar(select(User).where(User.email == email))

    async def find_by_id(self, user_id: Union[UUID, str]) -> Optional[User]:
        """Find a user by id; malformed ids simply match nobody."""
        if not isinstance(user_id, UUID):
            try:
                user_id = UUID(str(user_id))
            except ValueError:
                return None
        return await self.db.get(User, user_id)

    async def create(self, email: str, first_name: str, last_name: str) -> User:
        """Insert a new user and return the persisted row."""
        user = User(email=email, first_name=first_name, last_name=last_name)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user


async def get_user_repository(db: AsyncSession = Depends(get_session)) -> UserRepository:
    """Provide the user repository for dependency injection."""
    return UserRepository(db)

"""
User store: where authentication looks up user records.
"""
from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.features.users.models import User


class UserRecord(Protocol):
    id: str
    email: str
    name: str
    password_hash: str
    role: str
    department: str
    is_active: bool
    created_at: datetime


class UserStore(Protocol):
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    async def record_login(self, user_id: str, when: datetime) -> None:
        ...


class SqlUserStore:
    """UserStore backed by the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def record_login(self, user_id: str, when: datetime) -> None:
        await self.db.execute(
            update(User).where(User.id == user_id).values(last_login_at=when)
        )
        await self.db.commit()

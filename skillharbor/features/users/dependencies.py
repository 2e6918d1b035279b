"""
User-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillharbor.core.database.engine import get_db
from skillharbor.features.users.models import User


async def get_user_by_id(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Get user by ID or raise 404.

    Raises:
        HTTPException: 404 if user not found
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "User not found", "code": "USER_NOT_FOUND"}
        )

    return user

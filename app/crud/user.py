# app/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.auth import User
from typing import Optional
import uuid

async def get_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()

async def update_full_name(user: User, full_name: Optional[str], db: AsyncSession) -> User:
    user.full_name = full_name
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user

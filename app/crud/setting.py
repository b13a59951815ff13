# app/crud/setting.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from app.models.setting import UserSetting
from typing import Optional, Tuple
from datetime import datetime, timezone
import uuid

async def get_setting_for_user(user_id: uuid.UUID, db: AsyncSession) -> Optional[UserSetting]:
    """The user's settings row, or None when they never saved one."""
    result = await db.execute(select(UserSetting).where(UserSetting.user_id == user_id))
    return result.scalar_one_or_none()

async def upsert_setting_for_user(user_id: uuid.UUID, savings_percent: int, db: AsyncSession) -> Tuple[UserSetting, bool]:
    """
    Insert or replace the user's savings percentage, keyed on user_id.

    Returns the stored row and whether it was newly created.
    """
    existed = await get_setting_for_user(user_id, db) is not None
    now = datetime.now(timezone.utc)

    insert = sqlite_insert if db.bind.dialect.name == "sqlite" else pg_insert
    stmt = insert(UserSetting).values(
        user_id=user_id,
        savings_percent=savings_percent,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserSetting.user_id],
        set_={
            "savings_percent": stmt.excluded.savings_percent,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    await db.execute(stmt)
    await db.commit()

    # Re-read past the identity map so the returned row reflects the upsert
    result = await db.execute(
        select(UserSetting)
        .where(UserSetting.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one(), not existed

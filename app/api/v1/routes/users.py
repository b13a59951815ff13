# app/api/v1/routes/users.py
import uuid
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi_users import BaseUserManager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth import get_user_manager, User, UserRead, UserUpdate
from app.core.database import get_async_session
from app.crud.user import update_full_name
from app.api.deps import get_current_user

router = APIRouter(tags=["User Management"])
logger = logging.getLogger(__name__)

# 1) GET /users/me
@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user

# 2) PATCH /users/me
@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update the display name. Email and password go through the auth routes."""
    update_dict = user_update.model_dump(exclude_unset=True)
    if "full_name" not in update_dict:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )
    try:
        return await update_full_name(user, update_dict["full_name"], db)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Profile update failed for user {user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while updating profile"
        )

# 3) DELETE /users/me
@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_own_profile(
    user: User = Depends(get_current_user),
    user_manager: BaseUserManager[User, uuid.UUID] = Depends(get_user_manager),
):
    """Delete current user's account permanently, with its savings history"""
    try:
        await user_manager.delete(user)
    except SQLAlchemyError as e:
        logger.error(f"Account deletion failed for user {user.id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while deleting account"
        )
    return None

# app/api/v1/routes/auth.py
from fastapi import APIRouter, Depends, Response, status
from typing import Optional
import logging

from app.core.auth import User
from app.api.deps import get_optional_current_user

router = APIRouter(tags=["Authentication"])
logger = logging.getLogger(__name__)

# Registered before the fastapi-users JWT router so this logout wins
@router.post("/jwt/logout", status_code=status.HTTP_200_OK)
async def logout(
    response: Response,
    user: Optional[User] = Depends(get_optional_current_user),
):
    """
    Logout endpoint that doesn't require authentication.
    This endpoint will clear the access token cookie if present.
    """
    response.delete_cookie(key="access_token")
    if user is not None:
        logger.info(f"User {user.email} logged out")

    return {"detail": "Successfully logged out"}

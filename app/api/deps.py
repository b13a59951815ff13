# app/api/deps.py
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import jwt
import uuid
import logging

from app.core.database import get_async_session
from app.core.auth import User
from app.core.config import settings
from app.crud.user import get_user_by_id

logger = logging.getLogger(__name__)

# Security schemes
optional_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_from_token(token: str, db: AsyncSession) -> User:
    """Resolve an active user from a JWT issued by the login route."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    user_id_str = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = uuid.UUID(user_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID format in token")

    user = await get_user_by_id(user_id, db)
    if not user:
        raise _unauthorized("User not found")

    if getattr(user, "is_active", False) is False:
        raise _unauthorized("Inactive user")

    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> User:
    """
    Get the current user from a token in any of these locations:
    - Authorization header
    - Query parameters
    - Cookies
    """
    token = None

    if credentials and credentials.credentials:
        token = credentials.credentials

    # From query parameter
    if not token:
        token = request.query_params.get("token") or request.query_params.get("access_token")

    # From cookie
    if not token:
        token = request.cookies.get("access_token")
        # Remove "Bearer " prefix if present in cookie
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise _unauthorized("Not authenticated")

    return await get_current_user_from_token(token, db)


# Optional version of get_current_user that doesn't raise exceptions
async def get_optional_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Optional[User]:
    """
    Similar to get_current_user but returns None instead of raising an exception
    when authentication fails.
    """
    try:
        return await get_current_user(request, db, credentials)
    except HTTPException:
        return None

from fastapi import APIRouter

from app.core.auth import fastapi_users, auth_backend, UserRead, UserCreate
from app.api.v1.routes import auth, users, settings, savings, transactions

api_router = APIRouter()

# Custom logout first, then the fastapi-users auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/auth/jwt",
    tags=["Authentication"],
)
api_router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["Authentication"],
)
api_router.include_router(users.router, prefix="/users", tags=["User Management"])
api_router.include_router(settings.router)
api_router.include_router(savings.router)
api_router.include_router(transactions.router)

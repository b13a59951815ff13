# app/api/v1/routes/transactions.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.schemas.transaction import TransactionRead
from app.crud.transaction import get_transactions_for_user, get_recent_transactions
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user

# Transactions are immutable: allowances and unlocks are created through /savings
router = APIRouter(prefix="/transactions", tags=["transactions"])

@router.get("", response_model=List[TransactionRead])
async def read_transactions(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Full history, oldest first"""
    return await get_transactions_for_user(user.id, db)

@router.get("/recent", response_model=List[TransactionRead])
async def read_recent_transactions(
    limit: int = Query(10, ge=1, le=100, description="Maximum number of transactions to return"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Latest transactions, newest first"""
    return await get_recent_transactions(db, user.id, limit=limit)

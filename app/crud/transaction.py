# app/crud/transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from app.models.transaction import Transaction, TransactionType, UnlockReason
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

async def get_transactions_for_user(user_id: uuid.UUID, db: AsyncSession) -> List[Transaction]:
    """All transactions of a user, oldest first."""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(Transaction.created_at)
    )
    return result.scalars().all()

async def get_recent_transactions(db: AsyncSession, user_id: uuid.UUID, limit: int = 10) -> List[Transaction]:
    """Most recent transactions for a user, newest first"""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == user_id)
        .order_by(desc(Transaction.created_at))
        .limit(limit)
    )
    return result.scalars().all()

def insert_transaction(
    db: AsyncSession,
    user_id: uuid.UUID,
    amount: Decimal,
    type: TransactionType,
    created_at: datetime,
    reason: Optional[UnlockReason] = None,
    notes: Optional[str] = None,
    savings_percent: Optional[int] = None,
    saved_amount: Optional[Decimal] = None,
) -> Transaction:
    """Stage a new ledger row on the session; the caller commits."""
    tx = Transaction(
        user_id=user_id,
        amount=amount,
        type=type,
        reason=reason,
        notes=notes,
        savings_percent=savings_percent,
        saved_amount=saved_amount,
        created_at=created_at,
    )
    db.add(tx)
    return tx

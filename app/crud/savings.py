# app/crud/savings.py
"""
Balance-of-record maintenance.

Each ledger action is written as one database transaction: the transaction row
and the balance change commit together or not at all. The balance is changed
with an in-database increment rather than read-then-write, so concurrent
submissions for the same user cannot lose an update.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update, func
from sqlalchemy.exc import SQLAlchemyError
from app.models.savings import SavingsBalance
from app.models.transaction import Transaction, TransactionType, UnlockReason
from app.crud.transaction import insert_transaction
from app.utils.ledger import LedgerValidationError, ZERO, format_money
from typing import Optional, Tuple
from datetime import datetime, timezone
from decimal import Decimal
import logging
import uuid

logger = logging.getLogger(__name__)

async def get_balance_for_user(user_id: uuid.UUID, db: AsyncSession) -> Optional[SavingsBalance]:
    """The cached balance row, or None before the first allowance."""
    result = await db.execute(
        select(SavingsBalance)
        .where(SavingsBalance.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def get_locked_amount(user_id: uuid.UUID, db: AsyncSession) -> Decimal:
    balance = await get_balance_for_user(user_id, db)
    return Decimal(balance.locked_amount) if balance else ZERO

async def increment_balance(
    user_id: uuid.UUID,
    delta: Decimal,
    db: AsyncSession,
    now: Optional[datetime] = None,
) -> bool:
    """
    Add ``delta`` to the balance inside the current database transaction.

    Negative deltas only apply while the balance covers them; returns False
    when that guard rejects the change. Does not commit.
    """
    now = now or datetime.now(timezone.utc)
    stmt = (
        update(SavingsBalance)
        .where(SavingsBalance.user_id == user_id)
        .values(
            locked_amount=func.round(SavingsBalance.locked_amount + delta, 2),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(SavingsBalance.locked_amount >= -delta)

    result = await db.execute(stmt)
    if result.rowcount:
        return True
    if delta < 0:
        return False

    db.add(SavingsBalance(user_id=user_id, locked_amount=delta, updated_at=now))
    await db.flush()
    return True

async def record_allowance(
    user_id: uuid.UUID,
    amount: Decimal,
    savings_percent: int,
    saved_amount: Decimal,
    db: AsyncSession,
) -> Tuple[Transaction, Decimal]:
    """Append the allowance and lock its saved portion. Returns the row and the new balance."""
    now = datetime.now(timezone.utc)
    try:
        tx = insert_transaction(
            db, user_id, amount, TransactionType.allowance, now,
            savings_percent=savings_percent, saved_amount=saved_amount,
        )
        await increment_balance(user_id, saved_amount, db, now)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise
    await db.refresh(tx)
    logger.info(f"Allowance {amount} recorded for user {user_id}; {saved_amount} locked at {savings_percent}%")
    return tx, await get_locked_amount(user_id, db)

async def record_unlock(
    user_id: uuid.UUID,
    amount: Decimal,
    reason: UnlockReason,
    notes: Optional[str],
    db: AsyncSession,
) -> Tuple[Transaction, Decimal]:
    """Append the unlock and release ``amount``. Returns the row and the new balance."""
    now = datetime.now(timezone.utc)
    try:
        tx = insert_transaction(db, user_id, amount, TransactionType.unlock, now, reason=reason, notes=notes)
        applied = await increment_balance(user_id, -amount, db, now)
        if not applied:
            await db.rollback()
        else:
            await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    if not applied:
        # Another session released savings between our read and this write
        current = await get_locked_amount(user_id, db)
        logger.warning(f"Unlock of {amount} for user {user_id} lost a race; balance is now {current}")
        raise LedgerValidationError(f"Enter a valid amount up to {format_money(current)}")

    await db.refresh(tx)
    logger.info(f"Unlock {amount} ({reason.value}) recorded for user {user_id}")
    return tx, await get_locked_amount(user_id, db)

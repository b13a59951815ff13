# app/api/v1/routes/savings.py
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from dataclasses import asdict
from typing import List
import uuid
import logging

from app.schemas.savings import (
    AllowanceCreate,
    AllowancePreview,
    AllowanceResult,
    BalanceAudit,
    BalanceRead,
    SeriesRead,
    SeriesRequest,
    UnlockCreate,
    UnlockReasonRead,
    UnlockResult,
)
from app.schemas.transaction import TransactionRead
from app.crud.setting import get_setting_for_user
from app.crud.savings import get_locked_amount, record_allowance, record_unlock
from app.crud.transaction import get_transactions_for_user
from app.core.config import settings
from app.core.database import get_async_session
from app.core.auth import User
from app.api.deps import get_current_user
from app.utils.ledger import (
    ZERO,
    LedgerValidationError,
    allowance_amount,
    allowance_message,
    apply_allowance,
    preview_allowance,
    recompute_locked_amount,
    to_decimal,
    unlock_message,
    unlock_reasons,
    validate_unlock,
)
from app.utils.savings_series import build_series

router = APIRouter(prefix="/savings", tags=["Savings"])
logger = logging.getLogger(__name__)


async def _current_percent(user_id: uuid.UUID, db: AsyncSession) -> int:
    setting = await get_setting_for_user(user_id, db)
    return setting.savings_percent if setting else settings.DEFAULT_SAVINGS_PERCENT


def _bad_request(e: LedgerValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


@router.get("", response_model=BalanceRead)
async def read_balance(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Locked savings and the percentage the next allowance will use."""
    return BalanceRead(
        locked_amount=await get_locked_amount(user.id, db),
        savings_percent=await _current_percent(user.id, db),
    )


@router.get("/unlock-reasons", response_model=List[UnlockReasonRead])
async def read_unlock_reasons():
    return unlock_reasons()


@router.get("/preview", response_model=AllowancePreview)
async def preview(
    amount: str = Query("0", description="Prospective allowance amount"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """How much of a prospective allowance would be locked. Nothing is written."""
    percent = await _current_percent(user.id, db)
    saved = preview_allowance(amount, percent)
    shown_amount = to_decimal(amount) if saved > 0 else ZERO
    return AllowancePreview(amount=shown_amount, savings_percent=percent, saved_amount=saved)


@router.post("/allowance", response_model=AllowanceResult, status_code=status.HTTP_201_CREATED)
async def add_allowance(
    allowance_in: AllowanceCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Record an allowance and lock the current percentage of it into savings.

    The saved portion is fixed at deposit time; later percentage changes do
    not touch it.
    """
    user_id = user.id
    percent = await _current_percent(user_id, db)
    current = await get_locked_amount(user_id, db)
    try:
        amount = allowance_amount(allowance_in.amount)
        _, saved = apply_allowance(current, amount, percent)
    except LedgerValidationError as e:
        logger.warning(f"Rejected allowance for user {user_id}: {e.message}")
        raise _bad_request(e)

    try:
        tx, locked = await record_allowance(user_id, amount, percent, saved, db)
    except SQLAlchemyError as e:
        logger.error(f"Error adding allowance for user {user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error adding allowance. Please try again."
        )

    return AllowanceResult(
        transaction=TransactionRead.model_validate(tx),
        saved_amount=saved,
        savings_percent=percent,
        locked_amount=locked,
        message=allowance_message(amount, saved, percent),
    )


@router.post("/unlock", response_model=UnlockResult, status_code=status.HTTP_201_CREATED)
async def unlock_savings(
    unlock_in: UnlockCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Release part of the locked savings for a stated reason.

    - **amount**: more than zero and at most the locked balance
    - **reason**: one of the ids from `/savings/unlock-reasons`
    - **notes**: required when the reason is `other`
    """
    user_id = user.id
    current = await get_locked_amount(user_id, db)
    try:
        amount, reason, notes = validate_unlock(current, unlock_in.amount, unlock_in.reason, unlock_in.notes)
        tx, locked = await record_unlock(user_id, amount, reason, notes, db)
    except LedgerValidationError as e:
        logger.warning(f"Rejected unlock for user {user_id}: {e.message}")
        raise _bad_request(e)
    except SQLAlchemyError as e:
        logger.error(f"Error unlocking savings for user {user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error unlocking. Please try again."
        )

    return UnlockResult(
        transaction=TransactionRead.model_validate(tx),
        locked_amount=locked,
        message=unlock_message(amount, reason),
    )


@router.get("/series", response_model=SeriesRead)
async def read_series(
    series_request: SeriesRequest = Depends(),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Cumulative locked savings over time, one point per period.

    - **granularity**: daily, weekly, monthly (default) or yearly
    """
    percent = await _current_percent(user.id, db)
    transactions = await get_transactions_for_user(user.id, db)
    points = build_series(transactions, percent, series_request.granularity)
    return SeriesRead(
        granularity=series_request.granularity,
        savings_percent=percent,
        points=[asdict(p) for p in points],
    )


@router.get("/audit", response_model=BalanceAudit)
async def audit_balance(
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Compare the cached balance with one rebuilt from the transaction history."""
    cached = await get_locked_amount(user.id, db)
    transactions = await get_transactions_for_user(user.id, db)
    recomputed = recompute_locked_amount(transactions, await _current_percent(user.id, db))
    if cached != recomputed:
        logger.warning(f"Balance drift for user {user.id}: cached {cached}, recomputed {recomputed}")
    return BalanceAudit(
        cached_amount=cached,
        recomputed_amount=recomputed,
        consistent=cached == recomputed,
        transaction_count=len(transactions),
    )

# app/schemas/savings.py
from typing import List, Literal, Optional
from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal

from app.schemas.transaction import TransactionRead

Granularity = Literal["daily", "weekly", "monthly", "yearly"]

class BalanceRead(BaseModel):
    locked_amount: Decimal
    savings_percent: int

class AllowanceCreate(BaseModel):
    amount: Decimal = Field(..., description="Allowance deposited, in currency units")

class AllowanceResult(BaseModel):
    transaction: TransactionRead
    saved_amount: Decimal
    savings_percent: int
    locked_amount: Decimal
    message: str

class UnlockCreate(BaseModel):
    amount: Decimal
    reason: Optional[str] = Field(None, description="One of the ids from /savings/unlock-reasons")
    notes: Optional[str] = None

class UnlockResult(BaseModel):
    transaction: TransactionRead
    locked_amount: Decimal
    message: str

class UnlockReasonRead(BaseModel):
    id: str
    label: str
    description: str

class AllowancePreview(BaseModel):
    amount: Decimal
    savings_percent: int
    saved_amount: Decimal

class SeriesRequest(BaseModel):
    granularity: Granularity = "monthly"

class SeriesPointRead(BaseModel):
    label: str
    amount: Decimal
    period_start: date

    class Config:
        from_attributes = True

class SeriesRead(BaseModel):
    granularity: Granularity
    savings_percent: int
    points: List[SeriesPointRead]

class BalanceAudit(BaseModel):
    cached_amount: Decimal
    recomputed_amount: Decimal
    consistent: bool
    transaction_count: int

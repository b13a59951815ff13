# app/schemas/transaction.py
from typing import Optional
from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.transaction import TransactionType, UnlockReason

class TransactionRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: Decimal
    type: TransactionType
    reason: Optional[UnlockReason] = None
    notes: Optional[str] = None
    savings_percent: Optional[int] = None
    saved_amount: Optional[Decimal] = None
    created_at: datetime

    class Config:
        from_attributes = True

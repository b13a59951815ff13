# app/models/transaction.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, Numeric, Integer, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

class TransactionType(str, enum.Enum):
    allowance = "allowance"
    unlock = "unlock"

class UnlockReason(str, enum.Enum):
    emergency = "emergency"
    education = "education"
    investment = "investment"
    travel = "travel"
    family = "family"
    health = "health"
    goal = "goal"
    other = "other"

class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(Enum(TransactionType, name="transaction_type"), nullable=False)
    # Only set for unlocks
    reason = Column(Enum(UnlockReason, name="unlock_reason"), nullable=True)
    notes = Column(String(length=500), nullable=True)
    # Only set for allowances: the rate in effect at deposit time and what it locked
    savings_percent = Column(Integer, nullable=True)
    saved_amount = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="transactions")

    def __repr__(self):
        return f"<Transaction type={self.type} amount={self.amount} user_id={self.user_id}>"

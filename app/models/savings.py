# app/models/savings.py
from sqlalchemy import Column, ForeignKey, Numeric, DateTime, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class SavingsBalance(Base):
    __tablename__ = "savings"
    __table_args__ = (
        CheckConstraint("locked_amount >= 0", name="ck_savings_locked_amount_non_negative"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    locked_amount = Column(Numeric(12, 2), nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="savings")

    def __repr__(self):
        return f"<SavingsBalance locked_amount={self.locked_amount} user_id={self.user_id}>"

# app/models/setting.py
from sqlalchemy import Column, ForeignKey, Integer, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base

class UserSetting(Base):
    __tablename__ = "user_settings"

    # One row per user; absent until the user first saves a preference
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    savings_percent = Column(Integer, nullable=False, default=20)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="setting")

    def __repr__(self):
        return f"<UserSetting savings_percent={self.savings_percent} user_id={self.user_id}>"

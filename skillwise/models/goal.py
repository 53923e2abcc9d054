from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, func, Date
from skillwise.database import Base

class Goal(Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    difficulty_level = Column(String, nullable=False, default="medium")  # easy, medium, hard, expert
    target_date = Column(Date, nullable=True)
    progress_percentage = Column(Integer, nullable=False, default=0)  # 0–100, derived from challenges
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

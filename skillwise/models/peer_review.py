from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, JSON, func
from skillwise.database import Base

class PeerReview(Base):
    __tablename__ = "peer_reviews"

    id = Column(Integer, primary_key=True, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    review_text = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)  # 1–5
    criteria_scores = Column(JSON, nullable=True)  # opaque, client-defined
    time_spent_minutes = Column(Integer, nullable=True)
    is_anonymous = Column(Boolean, nullable=False, default=True)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

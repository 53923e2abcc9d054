from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional

class PeerReviewSubmit(BaseModel):
    submission_id: int
    reviewee_id: int
    review_text: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    criteria_scores: Optional[Dict[str, Any]] = None
    time_spent_minutes: Optional[int] = Field(None, ge=0)
    is_anonymous: bool = True

class PeerReviewAssign(BaseModel):
    reviewer_id: int
    reviewee_id: int
    submission_id: int
    is_anonymous: bool = True

class PeerReviewComplete(BaseModel):
    review_text: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    criteria_scores: Optional[Dict[str, Any]] = None
    time_spent_minutes: Optional[int] = Field(None, ge=0)

class PeerReviewResponse(BaseModel):
    id: int
    reviewer_id: Optional[int]  # hidden on anonymous received reviews
    reviewee_id: int
    submission_id: int
    review_text: Optional[str]
    rating: Optional[int]
    criteria_scores: Optional[Dict[str, Any]]
    time_spent_minutes: Optional[int]
    is_anonymous: bool
    is_completed: bool
    completed_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    submission_text: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_row(cls, review, submission_text: Optional[str] = None, hide_reviewer: bool = False):
        resp = cls.model_validate(review)
        resp.submission_text = submission_text
        if hide_reviewer and review.is_anonymous:
            resp.reviewer_id = None
        return resp

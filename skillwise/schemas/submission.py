from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class SubmissionCreate(BaseModel):
    challenge_id: int
    submission_text: Optional[str] = None
    submission_url: Optional[str] = None
    notes: Optional[str] = None

class SubmissionPatch(BaseModel):
    status: Optional[str] = None  # pending, completed, rejected
    score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None
    reviewer_notes: Optional[str] = None

class SubmissionFilter(BaseModel):
    challenge_id: Optional[int] = None
    status: Optional[str] = None

class SubmissionResponse(BaseModel):
    id: int
    challenge_id: int
    user_id: int
    submission_text: Optional[str]
    submission_url: Optional[str]
    notes: Optional[str]
    status: str
    score: Optional[int]
    feedback: Optional[str]
    reviewer_notes: Optional[str]
    attempt_number: int
    reviewed_at: Optional[datetime]
    submitted_at: Optional[datetime]
    updated_at: Optional[datetime]
    # Resolved through the challenge, for progress-aware clients
    goal_id: Optional[int] = None
    challenge_title: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_row(cls, submission, goal_id: Optional[int] = None, challenge_title: Optional[str] = None):
        resp = cls.model_validate(submission)
        resp.goal_id = goal_id
        resp.challenge_title = challenge_title
        return resp

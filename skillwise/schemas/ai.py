from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional
from skillwise.schemas.submission import SubmissionResponse

class GenerateChallengeRequest(BaseModel):
    category: str = "programming"
    difficulty: str = "medium"
    topic: Optional[str] = None
    save_to_database: bool = Field(False, alias="saveToDatabase")
    goal_id: Optional[int] = None

    model_config = {"populate_by_name": True}

class GeneratedChallengeResponse(BaseModel):
    challenge: Dict[str, Any]
    metadata: Dict[str, Any]
    saved: bool = False
    challenge_id: Optional[int] = None

class FeedbackRequest(BaseModel):
    challenge_id: int = Field(..., alias="challengeId")
    submission_text: str = Field(..., min_length=1, alias="submissionText")

    model_config = {"populate_by_name": True}

class FeedbackResponse(BaseModel):
    feedback: Dict[str, Any]
    metadata: Dict[str, Any]
    submission: Optional[SubmissionResponse] = None

class HintsResponse(BaseModel):
    hints: Dict[str, Any]
    attempts: int

class FeedbackHistoryItem(BaseModel):
    submission_id: int
    challenge_id: int
    challenge_title: Optional[str] = None
    challenge_category: Optional[str] = None
    feedback: Dict[str, Any]
    score: Optional[int] = None
    attempt_number: int
    submitted_at: Optional[datetime] = None

class FeedbackHistoryResponse(BaseModel):
    feedback: List[FeedbackHistoryItem]
    count: int

class AnalysisResponse(BaseModel):
    analysis: Dict[str, Any]
    stats: Dict[str, Any]
    metadata: Dict[str, Any]

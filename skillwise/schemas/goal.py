from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

class GoalCreate(BaseModel):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[str] = None  # easy, medium, hard, expert (any case)
    target_date: Optional[date] = None

class GoalPatch(BaseModel):
    """Only the fields a client actually sends are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[str] = None
    target_date: Optional[date] = None
    progress_percentage: Optional[int] = None
    is_completed: Optional[bool] = None

class GoalFilter(BaseModel):
    category: Optional[str] = None
    difficulty: Optional[str] = None
    is_completed: Optional[bool] = None

class GoalProgressUpdate(BaseModel):
    progress: int

class GoalResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    category: Optional[str]
    difficulty_level: str
    target_date: Optional[date]
    progress_percentage: int
    is_completed: bool
    completed_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}

class GoalProgressResponse(BaseModel):
    goal_id: int
    progress_percentage: int
    is_completed: bool
    completed_at: Optional[datetime]
    target_date: Optional[date]
    is_overdue: bool
    total_challenges: int = Field(..., ge=0)
    completed_challenges: int = Field(..., ge=0)

from pydantic import BaseModel, Field, computed_field
from datetime import datetime
from typing import Any, List, Optional
from skillwise.services.scoring import calculate_difficulty

class ChallengeCreate(BaseModel):
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[str] = None
    goal_id: Optional[int] = None
    status: Optional[str] = None
    points_reward: Optional[int] = Field(None, gt=0)
    estimated_time_minutes: Optional[int] = Field(None, gt=0)
    max_attempts: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
    prerequisites: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    test_cases: Optional[List[Any]] = None

class ChallengePatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    instructions: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[str] = None
    goal_id: Optional[int] = None
    status: Optional[str] = None
    points_reward: Optional[int] = Field(None, gt=0)
    estimated_time_minutes: Optional[int] = Field(None, gt=0)
    max_attempts: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None
    tags: Optional[List[str]] = None
    prerequisites: Optional[List[str]] = None
    learning_objectives: Optional[List[str]] = None
    test_cases: Optional[List[Any]] = None

class ChallengeFilter(BaseModel):
    goal_id: Optional[int] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None
    tags: Optional[List[str]] = None
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)

class ChallengeResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    instructions: Optional[str]
    category: Optional[str]
    difficulty_level: str
    goal_id: Optional[int]
    created_by: Optional[int]
    status: str
    points_reward: int
    estimated_time_minutes: Optional[int]
    max_attempts: int
    is_active: bool
    tags: List[str] = []
    prerequisites: List[str] = []
    learning_objectives: List[str] = []
    test_cases: List[Any] = []
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def difficulty_score(self) -> int:
        return calculate_difficulty(self)

from typing import List, Optional
from fastapi import APIRouter, Depends, status
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_goal_service
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.goal import (
    GoalCreate, GoalPatch, GoalFilter, GoalProgressUpdate, GoalResponse, GoalProgressResponse
)
from skillwise.services.goal import GoalService

router = APIRouter(prefix="/goals", tags=["goals"])

@router.get("", response_model=ApiResponse[List[GoalResponse]])
async def list_goals(
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    is_completed: Optional[bool] = None,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    filters = GoalFilter(category=category, difficulty=difficulty, is_completed=is_completed)
    rows = await goals.list(current_user.id, filters)
    return ApiResponse(
        data=[GoalResponse.model_validate(g) for g in rows],
        message="Goals retrieved successfully"
    )

@router.post("", response_model=ApiResponse[GoalResponse], status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    goal = await goals.create(current_user.id, goal_in)
    return ApiResponse(data=GoalResponse.model_validate(goal), message="Goal created successfully")

@router.get("/{goal_id}", response_model=ApiResponse[GoalResponse])
async def get_goal(
    goal_id: int,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    goal = await goals.get(current_user.id, goal_id)
    return ApiResponse(data=GoalResponse.model_validate(goal), message="Goal retrieved successfully")

@router.put("/{goal_id}", response_model=ApiResponse[GoalResponse])
async def update_goal(
    goal_id: int,
    patch: GoalPatch,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    goal = await goals.update(current_user.id, goal_id, patch)
    return ApiResponse(data=GoalResponse.model_validate(goal), message="Goal updated successfully")

@router.delete("/{goal_id}", response_model=ApiResponse[None])
async def delete_goal(
    goal_id: int,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    await goals.delete(current_user.id, goal_id)
    return ApiResponse(message="Goal deleted successfully")

@router.get("/{goal_id}/progress", response_model=ApiResponse[GoalProgressResponse])
async def get_goal_progress(
    goal_id: int,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    details = await goals.progress_details(current_user.id, goal_id)
    return ApiResponse(data=details, message="Goal progress retrieved successfully")

@router.put("/{goal_id}/progress", response_model=ApiResponse[GoalResponse])
async def update_goal_progress(
    goal_id: int,
    body: GoalProgressUpdate,
    goals: GoalService = Depends(get_goal_service),
    current_user = Depends(get_current_user)
):
    goal = await goals.update_progress(current_user.id, goal_id, body.progress)
    return ApiResponse(data=GoalResponse.model_validate(goal), message="Goal progress updated successfully")

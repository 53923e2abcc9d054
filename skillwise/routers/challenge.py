from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_challenge_service
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.challenge import ChallengeCreate, ChallengePatch, ChallengeFilter, ChallengeResponse
from skillwise.services.challenge import ChallengeService

router = APIRouter(prefix="/challenges", tags=["challenges"])

@router.get("", response_model=ApiResponse[List[ChallengeResponse]])
async def list_challenges(
    goal_id: Optional[int] = Query(None, alias="goalId"),
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    status: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    filters = ChallengeFilter(
        goal_id=goal_id, category=category, difficulty=difficulty, status=status,
        is_active=is_active, search=search, tags=tags, limit=limit, offset=offset,
    )
    rows = await challenges.list(filters)
    return ApiResponse(
        data=[ChallengeResponse.model_validate(c) for c in rows],
        message="Challenges retrieved successfully"
    )

@router.get("/categories", response_model=ApiResponse[List[str]])
async def list_categories(
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    return ApiResponse(data=await challenges.categories(), message="Categories retrieved successfully")

@router.get("/mine", response_model=ApiResponse[List[ChallengeResponse]])
async def list_my_challenges(
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    rows = await challenges.list_created_by(current_user.id)
    return ApiResponse(data=[ChallengeResponse.model_validate(c) for c in rows])

@router.post("", response_model=ApiResponse[ChallengeResponse], status_code=status.HTTP_201_CREATED)
async def create_challenge(
    challenge_in: ChallengeCreate,
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    challenge = await challenges.create(challenge_in, current_user.id)
    return ApiResponse(data=ChallengeResponse.model_validate(challenge), message="Challenge created successfully")

@router.get("/{challenge_id}", response_model=ApiResponse[ChallengeResponse])
async def get_challenge(
    challenge_id: int,
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    challenge = await challenges.get(challenge_id)
    return ApiResponse(data=ChallengeResponse.model_validate(challenge), message="Challenge retrieved successfully")

@router.put("/{challenge_id}", response_model=ApiResponse[ChallengeResponse])
async def update_challenge(
    challenge_id: int,
    patch: ChallengePatch,
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    challenge = await challenges.update(challenge_id, patch, current_user.id)
    return ApiResponse(data=ChallengeResponse.model_validate(challenge), message="Challenge updated successfully")

@router.delete("/{challenge_id}", response_model=ApiResponse[None])
async def delete_challenge(
    challenge_id: int,
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    await challenges.delete(challenge_id, current_user.id)
    return ApiResponse(message="Challenge deleted successfully")

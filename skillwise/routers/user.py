from fastapi import APIRouter, Depends
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_auth_service
from skillwise.models.user import User
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.user import ProfileUpdate, UserResponse
from skillwise.services.auth import AuthService

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(current_user), message="Profile retrieved successfully")

@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    profile_in: ProfileUpdate,
    auth: AuthService = Depends(get_auth_service),
    current_user: User = Depends(get_current_user)
):
    user = await auth.update_profile(current_user, profile_in)
    return ApiResponse(data=UserResponse.model_validate(user), message="Profile updated successfully")

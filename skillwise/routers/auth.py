# skillwise/routers/auth.py
from typing import Optional
from fastapi import APIRouter, Depends, status

from skillwise.models.user import User
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.user import UserCreate, UserLogin, RefreshRequest, LogoutRequest, UserResponse, Token
from skillwise.services.auth import AuthService
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_auth_service


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse[Token], status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, auth: AuthService = Depends(get_auth_service)):
    token = await auth.register(user_in)
    return ApiResponse(data=token, message="Registration successful")


@router.post("/login", response_model=ApiResponse[Token])
async def login(user_in: UserLogin, auth: AuthService = Depends(get_auth_service)):
    token = await auth.login(user_in.email, user_in.password)
    return ApiResponse(data=token, message="Login successful")


@router.post("/refresh", response_model=ApiResponse[Token])
async def refresh(body: RefreshRequest, auth: AuthService = Depends(get_auth_service)):
    token = await auth.refresh(body.refresh_token)
    return ApiResponse(data=token, message="Token refreshed successfully")


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    body: Optional[LogoutRequest] = None,
    auth: AuthService = Depends(get_auth_service),
    current_user: User = Depends(get_current_user)
):
    await auth.logout(current_user, body.refresh_token if body else None)
    return ApiResponse(message="Logout successful")


@router.get("/me", response_model=ApiResponse[UserResponse])
async def read_users_me(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(current_user))

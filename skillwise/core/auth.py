# skillwise/core/auth.py
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.database import get_db
from skillwise.models.user import User
from skillwise.core.errors import AuthError
from skillwise.core.security import decode_token
from skillwise.repositories.user import UserRepository

# auto_error=False so a missing header is a 401 from our handler, not FastAPI's 403
reusable_oauth2 = HTTPBearer(auto_error=False)

async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: Optional[HTTPAuthorizationCredentials] = Depends(reusable_oauth2)
) -> User:
    if token is None or not token.credentials:
        raise AuthError("You are not logged in! Please log in to get access.")

    user_id = decode_token(token.credentials)

    user = await UserRepository(db).get(user_id)
    if user is None:
        raise AuthError("The user belonging to this token does no longer exist.")
    if not user.is_active:
        raise AuthError("Your account has been deactivated.")
    return user


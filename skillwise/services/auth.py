import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.core.errors import AuthError, Conflict, ValidationError
from skillwise.core.security import (
    create_access_token, create_refresh_token, decode_claims, subject, REFRESH_TOKEN_TYPE,
)
from skillwise.models.revoked_token import RevokedToken
from skillwise.models.user import User
from skillwise.repositories.revoked_token import RevokedTokenRepository
from skillwise.repositories.user import UserRepository
from skillwise.schemas.user import UserCreate, ProfileUpdate, Token, UserResponse
from skillwise.services.unit_of_work import atomic
from skillwise.utils.password import hash_password, verify_password, validate_password_strength

logger = logging.getLogger(__name__)


def issue_tokens(user: User) -> Token:
    claims = {"sub": str(user.id), "email": user.email, "role": user.role}
    return Token(
        access_token=create_access_token(claims),
        refresh_token=create_refresh_token({"sub": str(user.id)}),
        token_type="bearer",
        user=UserResponse.model_validate(user),
    )


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        users: Optional[UserRepository] = None,
        revoked: Optional[RevokedTokenRepository] = None,
    ):
        self.db = db
        self.users = users or UserRepository(db)
        self.revoked = revoked or RevokedTokenRepository(db)

    async def register(self, user_in: UserCreate) -> Token:
        email = user_in.email.lower()
        if await self.users.get_by_email(email):
            raise Conflict("User already exists with this email")

        try:
            validate_password_strength(user_in.password)
        except ValueError as e:
            raise ValidationError(str(e))

        user = User(
            email=email,
            password_hash=hash_password(user_in.password),
            first_name=user_in.first_name,
            last_name=user_in.last_name,
            role="student",
            is_active=True,
            is_verified=False,
        )
        async with atomic(self.db):
            await self.users.add(user)
        await self.db.refresh(user)
        logger.info("User %s registered", user.id)
        return issue_tokens(user)

    async def login(self, email: str, password: str) -> Token:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt for %s", email)
            raise AuthError("Invalid credentials")
        if not user.is_active:
            raise AuthError("Account is deactivated")

        async with atomic(self.db):
            await self.users.touch_last_login(user)
        await self.db.refresh(user)
        return issue_tokens(user)

    async def refresh(self, refresh_token: str) -> Token:
        claims = decode_claims(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        if claims.get("jti") and await self.revoked.is_revoked(claims["jti"]):
            raise AuthError("Invalid or expired refresh token")
        user = await self.users.get(subject(claims))
        if user is None or not user.is_active:
            raise AuthError("Invalid or expired refresh token")
        return Token(
            access_token=create_access_token({"sub": str(user.id), "email": user.email, "role": user.role}),
            token_type="bearer",
        )

    async def logout(self, user: User, refresh_token: Optional[str] = None) -> None:
        """Revoke the given refresh token. Access tokens expire on their own."""
        if refresh_token:
            claims = decode_claims(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
            if subject(claims) != user.id or not claims.get("jti"):
                raise AuthError("Invalid refresh token")
            if not await self.revoked.is_revoked(claims["jti"]):
                async with atomic(self.db):
                    await self.revoked.add(RevokedToken(
                        jti=claims["jti"],
                        user_id=user.id,
                        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
                    ))
        logger.info("User %s logged out", user.id)

    async def update_profile(self, user: User, profile_in: ProfileUpdate) -> User:
        changes = {k: v for k, v in profile_in.model_dump(exclude_unset=True).items() if v is not None}
        if changes:
            async with atomic(self.db):
                for field, value in changes.items():
                    setattr(user, field, value)
                self.db.add(user)
            await self.db.refresh(user)
        return user

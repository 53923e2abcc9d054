# skillwise/core/security.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from skillwise.config import settings
from skillwise.core.errors import AuthError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _create_token(data: dict, expires_delta: timedelta, token_type: str) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        data,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        ACCESS_TOKEN_TYPE,
    )


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    # jti lets a single refresh token be revoked on logout
    return _create_token(
        {**data, "jti": uuid.uuid4().hex},
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        REFRESH_TOKEN_TYPE,
    )


def decode_claims(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Your token has expired! Please log in again.")
    except JWTError:
        raise AuthError("Invalid token. Please log in again.")

    if payload.get("type") != expected_type:
        raise AuthError("Invalid token. Please log in again.")
    return payload


def subject(claims: dict) -> int:
    user_id = claims.get("sub")
    if user_id is None:
        raise AuthError()
    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise AuthError()


def decode_token(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> int:
    """Return the user id carried by a token of the expected type."""
    return subject(decode_claims(token, expected_type))

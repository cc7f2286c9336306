"""
Authentication utilities for JWT token management and password hashing.
Provides token issue/verification and bcrypt hashing helpers.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from fastapi.concurrency import run_in_threadpool
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from classifieds_api.config import settings
from classifieds_api.utils.exceptions import (
    InternalServerError,
    InvalidTokenError,
    TokenExpiredError
)
import logging

logger = logging.getLogger(__name__)


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds
)


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, user_id: str, exp: datetime, iat: Optional[datetime] = None):
        self.user_id = user_id
        self.exp = exp
        self.iat = iat

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        iat = data.get("iat")
        return cls(
            user_id=data["sub"],
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(iat, tz=timezone.utc) if iat else None
        )


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT identifying a user.

    Args:
        user_id: User identifier
        expires_delta: Optional custom lifetime, defaults to JWT_EXPIRE_MINUTES

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expire_minutes)

    to_encode = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_token(token: str) -> TokenPayload:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If the token is past its expiry
        InvalidTokenError: If the token is malformed, forged or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        raise InvalidTokenError()

    if not payload.get("sub") or "exp" not in payload:
        raise InvalidTokenError()

    return TokenPayload.from_dict(payload)


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify password against hash.

    A mismatch returns False; a hash the comparator cannot read is an
    internal failure.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password comparison failed: {e}")
        raise InternalServerError("Error comparing passwords")


async def hash_password_async(password: str) -> str:
    """Hash in the threadpool so the event loop keeps serving requests."""
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    """Verify in the threadpool so the event loop keeps serving requests."""
    return await run_in_threadpool(verify_password, plain_password, hashed_password)

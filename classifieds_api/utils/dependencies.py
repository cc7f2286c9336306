"""
FastAPI dependency injection utilities for authentication and services.
Provides reusable dependencies for route protection and identity resolution.
"""

from typing import Optional
from fastapi import Depends, Path, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from classifieds_api.database import get_db
from classifieds_api.schemas.auth import CurrentUser
from classifieds_api.services.auth import AuthService
from classifieds_api.services.listing import ListingService
from classifieds_api.utils.exceptions import UnauthorizedError, InsufficientPermissionsError
from classifieds_api.utils.validators import validate_object_id


# HTTP Bearer token security scheme; a missing header is reported by us, not FastAPI
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_listing_service(db: AsyncSession = Depends(get_db)) -> ListingService:
    """
    Get listing service instance.

    Args:
        db: Database session

    Returns:
        ListingService instance
    """
    return ListingService(db)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    """
    Resolve the bearer token into the active user making the request.

    Args:
        request: Incoming request, tagged with the user id for error logging
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Identity of the authenticated user

    Raises:
        UnauthorizedError: If no token is provided, or the user is unknown or inactive
        InvalidTokenError: If the token is malformed or forged
        TokenExpiredError: If the token is expired
    """
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("No token provided")

    user = await auth_service.get_user_from_token(credentials.credentials)
    request.state.user_id = user.id

    return CurrentUser.model_validate(user.to_dict())


async def get_optional_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[CurrentUser]:
    """
    Get current user if a valid token is provided, otherwise None.

    Args:
        request: Incoming request
        credentials: HTTP Bearer credentials (optional)
        auth_service: Authentication service

    Returns:
        Identity if authenticated, None otherwise
    """
    if not credentials:
        return None

    try:
        return await get_current_user(request, credentials, auth_service)
    except UnauthorizedError:
        # Public endpoints serve anonymous callers when authentication fails
        return None


def ensure_admin(user: Optional[CurrentUser]) -> CurrentUser:
    """
    Require an identity with the admin role.

    Raises:
        InsufficientPermissionsError: If there is no identity or it is not an admin
    """
    if user is None or not user.is_admin:
        raise InsufficientPermissionsError("access admin resources")
    return user


async def get_current_admin_user(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """
    Get current user with admin role.

    Args:
        current_user: Current active user

    Returns:
        Admin identity

    Raises:
        ForbiddenError: If user is not an admin
    """
    return ensure_admin(current_user)


def valid_object_id(id: str = Path(..., description="24-character hexadecimal identifier")) -> str:
    """Path dependency rejecting malformed identifiers before any lookup."""
    return validate_object_id(id)

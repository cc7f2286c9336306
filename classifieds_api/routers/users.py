"""
User administration endpoints.
Admins can page through accounts and activate or deactivate them.
"""

from fastapi import APIRouter, Depends, Query

from classifieds_api.config import settings
from classifieds_api.services.auth import AuthService
from classifieds_api.schemas.auth import (
    CurrentUser,
    UserStatusUpdateRequest,
    UserEnvelope,
    UserListResponse
)
from classifieds_api.schemas.error import get_error_responses
from classifieds_api.utils.dependencies import (
    get_auth_service,
    get_current_admin_user,
    valid_object_id
)


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="Page through all accounts. Admin only.",
    responses=get_error_responses(400, 401, 403)
)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    admin: CurrentUser = Depends(get_current_admin_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserListResponse:
    users, total = await auth_service.list_users(page=page, limit=limit)
    return UserListResponse.model_validate({
        "total": total,
        "page": page,
        "limit": limit,
        "users": [user.to_dict() for user in users],
    })


@router.put(
    "/{id}/status",
    response_model=UserEnvelope,
    summary="Activate or deactivate a user",
    description="Inactive users can no longer authenticate. Admin only.",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_user_status(
    status_data: UserStatusUpdateRequest,
    admin: CurrentUser = Depends(get_current_admin_user),
    user_id: str = Depends(valid_object_id),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserEnvelope:
    """
    Change a user's active flag.

    Raises:
        InsufficientPermissionsError: If an admin tries to deactivate themselves
        UserNotFoundError: If the user does not exist
    """
    user = await auth_service.update_user_status(admin.id, user_id, status_data.is_active)
    state = "activated" if user.is_active else "deactivated"
    return UserEnvelope.model_validate({
        "success": True,
        "message": f"User {state}",
        "data": {"user": user.to_dict()},
    })

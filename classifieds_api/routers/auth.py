"""
Authentication API endpoints for registration, login and account management.
Provides JWT-based authentication for classifieds publishers.
"""

from fastapi import APIRouter, Depends, status
from classifieds_api.services.auth import AuthService
from classifieds_api.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ChangePasswordRequest,
    CurrentUser,
    AuthResponse,
    UserEnvelope,
    MessageResponse
)
from classifieds_api.schemas.error import get_error_responses
from classifieds_api.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create an account and return it together with a JWT token",
    responses=get_error_responses(400, 409)
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a new user.

    Args:
        register_data: Name, email and password
        auth_service: Authentication service

    Returns:
        Envelope with the created user and a token

    Raises:
        DuplicateKeyError: If the email is already registered
    """
    user, token = await auth_service.register(
        name=register_data.name,
        email=register_data.email,
        password=register_data.password
    )

    return AuthResponse.model_validate({
        "success": True,
        "message": "User registered successfully",
        "data": {"user": user.to_dict(), "token": token},
    })


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns a JWT token",
    responses=get_error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return a JWT token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        UnauthorizedError: If the account is inactive
    """
    user, token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return AuthResponse.model_validate({
        "success": True,
        "message": "Login successful",
        "data": {"user": user.to_dict(), "token": token},
    })


@router.get(
    "/me",
    response_model=UserEnvelope,
    response_model_exclude_none=True,
    summary="Get current user",
    description="Get the authenticated user's account",
    responses=get_error_responses(401)
)
async def get_me(current_user: CurrentUser = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(success=True, data={"user": current_user})


@router.put(
    "/profile",
    response_model=UserEnvelope,
    summary="Update profile",
    description="Change name and/or email of the authenticated user",
    responses=get_error_responses(400, 401, 409)
)
async def update_profile(
    profile_data: ProfileUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserEnvelope:
    """
    Update the authenticated user's profile.

    Raises:
        DuplicateKeyError: If the new email belongs to another account
    """
    user = await auth_service.update_profile(
        current_user.id,
        profile_data.model_dump(exclude_unset=True)
    )

    return UserEnvelope.model_validate({
        "success": True,
        "message": "Profile updated successfully",
        "data": {"user": user.to_dict()},
    })


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Change password",
    description="Replace the password after checking the current one",
    responses=get_error_responses(400, 401)
)
async def change_password(
    password_data: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    """
    Change the authenticated user's password.

    Raises:
        UnauthorizedError: If the current password is incorrect
    """
    await auth_service.change_password(
        current_user.id,
        current_password=password_data.current_password,
        new_password=password_data.new_password
    )

    return MessageResponse(success=True, message="Password changed successfully")

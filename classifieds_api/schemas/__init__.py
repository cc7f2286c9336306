"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    ChangePasswordRequest,
    UserStatusUpdateRequest,
    UserResponse,
    CurrentUser,
    AuthResponse,
    UserEnvelope,
    MessageResponse,
    UserListResponse
)

# Listing schemas
from .listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingListResponse,
    ListingDeleteResponse,
    validate_listing_payload,
    parse_listing_payload
)

# Error schemas
from .error import ErrorResponse, FieldViolation, get_error_responses

__all__ = [
    # Authentication
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "ChangePasswordRequest",
    "UserStatusUpdateRequest",
    "UserResponse",
    "CurrentUser",
    "AuthResponse",
    "UserEnvelope",
    "MessageResponse",
    "UserListResponse",

    # Listing
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "ListingListResponse",
    "ListingDeleteResponse",
    "validate_listing_payload",
    "parse_listing_payload",

    # Errors
    "ErrorResponse",
    "FieldViolation",
    "get_error_responses",
]

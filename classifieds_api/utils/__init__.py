"""
Utility modules for the classifieds API.
"""

from .auth import (
    create_access_token,
    verify_token,
    hash_password,
    verify_password,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationFailedError,
    MalformedIdentifierError,
    DuplicateKeyError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    InternalServerError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InsufficientPermissionsError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationFailedError",
    "MalformedIdentifierError",
    "DuplicateKeyError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "InternalServerError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InsufficientPermissionsError",
]

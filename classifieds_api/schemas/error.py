"""
Error response schemas for API documentation.
Describes the uniform failure envelope produced by the error handler.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Any


class FieldViolation(BaseModel):
    """A single field-level validation failure."""

    field: str = Field(..., description="Dotted path of the offending field", examples=["price"])
    message: str = Field(..., description="Human-readable reason", examples=["Input should be greater than 0"])


class ErrorResponse(BaseModel):
    """Uniform failure envelope."""

    success: bool = Field(False, description="Always false for errors")
    message: str = Field(..., description="Human-readable error message")
    errors: Optional[List[FieldViolation]] = Field(None, description="Validation failures, when any")
    field: Optional[str] = Field(None, description="Offending field for identifier and uniqueness errors")
    stack: Optional[str] = Field(None, description="Traceback, outside production only")


def _example(summary: str, value: Dict[str, Any]) -> Dict[str, Any]:
    return {"summary": summary, "value": {"success": False, **value}}


COMMON_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {
        "description": "Bad Request - validation failed or malformed identifier",
        "model": ErrorResponse,
        "content": {
            "application/json": {
                "examples": {
                    "validation": _example("Validation error", {
                        "message": "Validation error",
                        "errors": [{"field": "price", "message": "Input should be greater than 0"}],
                    }),
                    "invalid_id": _example("Invalid ID", {"message": "Invalid ID format", "field": "id"}),
                }
            }
        },
    },
    401: {
        "description": "Unauthorized - missing, invalid or expired token",
        "model": ErrorResponse,
        "content": {
            "application/json": {
                "examples": {
                    "no_token": _example("No token", {"message": "No token provided"}),
                    "invalid_token": _example("Invalid token", {"message": "Invalid token"}),
                    "expired_token": _example("Expired token", {"message": "Token expired"}),
                }
            }
        },
    },
    403: {
        "description": "Forbidden - insufficient role",
        "model": ErrorResponse,
    },
    404: {
        "description": "Not Found",
        "model": ErrorResponse,
    },
    409: {
        "description": "Conflict - unique field already used",
        "model": ErrorResponse,
        "content": {
            "application/json": {
                "example": {"success": False, "message": "email already exists", "field": "email"}
            }
        },
    },
    500: {
        "description": "Internal Server Error",
        "model": ErrorResponse,
    },
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Select documented error responses for a route.

    Args:
        status_codes: HTTP status codes the route can produce

    Returns:
        Mapping suitable for the ``responses`` argument of a route decorator
    """
    return {code: COMMON_ERROR_RESPONSES[code] for code in status_codes if code in COMMON_ERROR_RESPONSES}

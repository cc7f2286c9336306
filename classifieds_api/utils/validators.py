"""
Validation helpers shared by schemas, dependencies and the error handler.
Provides identifier checks, field patterns and violation formatting.
"""

import re
from typing import Any, Dict, Iterable, List

from classifieds_api.utils.exceptions import MalformedIdentifierError


OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")
PHONE_PATTERN = re.compile(r"^[0-9+\-() ]+$")
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

# Leading loc segments FastAPI adds to request validation errors
REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")

VALUE_ERROR_PREFIXES = ("Value error, ", "Assertion failed, ")


def validate_object_id(value: Any, field: str = "id") -> str:
    """
    Check that a value has the shape of a store identifier (24 hex chars).

    Args:
        value: Candidate identifier
        field: Name reported back to the client

    Returns:
        The identifier, lowercased

    Raises:
        MalformedIdentifierError: If the value is not a valid identifier
    """
    if not isinstance(value, str) or not OBJECT_ID_PATTERN.fullmatch(value):
        raise MalformedIdentifierError(field=field, value=value)
    return value.lower()


def format_field_path(loc: Iterable[Any]) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts) or "body"


def format_violations(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Convert pydantic error dictionaries into ``{field, message}`` pairs.

    Args:
        errors: Output of ``ValidationError.errors()``

    Returns:
        One entry per violation, in the order pydantic reported them
    """
    violations = []
    for error in errors:
        message = str(error.get("msg", "Invalid value"))
        for prefix in VALUE_ERROR_PREFIXES:
            if message.startswith(prefix):
                message = message[len(prefix):]
        violations.append({
            "field": format_field_path(error.get("loc", ())),
            "message": message,
        })
    return violations

"""
Error handling service for consistent error response formatting and logging.
Every failure leaves the API as one envelope: {success: false, message, ...}.
"""

from typing import Dict, Any, Optional, List
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from classifieds_api.config import settings
from classifieds_api.repositories.base import translate_integrity_error
from classifieds_api.utils.exceptions import APIException, ValidationFailedError
from classifieds_api.utils.validators import format_violations
import logging
import traceback

logger = logging.getLogger(__name__)


class ErrorHandlerService:
    """
    Service for handling and formatting errors consistently across the application.
    Client errors are logged as warnings, server errors as errors.
    """

    @staticmethod
    def format_error_response(
        message: str,
        errors: Optional[List[Dict[str, str]]] = None,
        field: Optional[str] = None,
        stack: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Format error response in a consistent structure.

        Args:
            message: Human-readable error message
            errors: Optional list of field violations
            field: Optional offending field
            stack: Optional traceback, never sent in production

        Returns:
            Formatted error response dictionary
        """
        response: Dict[str, Any] = {"success": False, "message": message}

        if errors:
            response["errors"] = errors

        if field:
            response["field"] = field

        if stack:
            response["stack"] = stack

        return response

    @staticmethod
    def request_context(request: Optional[Request]) -> Dict[str, Any]:
        """Method, path, client address and resolved user id for log records."""
        if request is None:
            return {}
        return {
            "method": request.method,
            "path": request.url.path,
            "ip": request.client.host if request.client else None,
            "user_id": getattr(request.state, "user_id", None),
        }

    @staticmethod
    def _log(status_code: int, message: str, request: Optional[Request], **extra) -> None:
        context = {**ErrorHandlerService.request_context(request), "status_code": status_code, **extra}
        if status_code >= 500:
            logger.error(message, extra=context, exc_info=True)
        else:
            logger.warning(message, extra=context)

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle custom API exceptions with structured response.

        Args:
            exception: API exception instance
            request: Optional FastAPI request object

        Returns:
            JSON response with formatted error
        """
        errors = exception.field_errors if isinstance(exception, ValidationFailedError) else None

        ErrorHandlerService._log(
            exception.status_code,
            f"API Exception: {exception.error_code} - {exception.detail}",
            request,
            error_code=exception.error_code
        )

        error_response = ErrorHandlerService.format_error_response(
            message=exception.detail,
            errors=errors,
            field=exception.field
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request validation errors with field-level details.

        Args:
            exception: FastAPI request validation error
            request: Optional FastAPI request object

        Returns:
            400 JSON response listing every violation
        """
        violations = format_violations(exception.errors())

        ErrorHandlerService._log(
            400,
            f"Validation Error: {len(violations)} field errors",
            request,
            validation_errors=violations
        )

        return JSONResponse(
            status_code=400,
            content=ErrorHandlerService.format_error_response(
                message="Validation error",
                errors=violations
            )
        )

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle database errors that escaped the repositories.

        Constraint violations are translated like the repositories do;
        anything else is an internal error.

        Args:
            exception: SQLAlchemy error
            request: Optional FastAPI request object

        Returns:
            JSON response with database error information
        """
        if isinstance(exception, IntegrityError):
            translated = translate_integrity_error(exception)
            if isinstance(translated, APIException):
                return ErrorHandlerService.handle_api_exception(translated, request)

        return ErrorHandlerService.handle_unexpected_error(exception, request)

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle Starlette HTTP exceptions, including unmatched routes.

        Args:
            exception: HTTP exception
            request: Optional FastAPI request object

        Returns:
            JSON response with HTTP error information
        """
        message = str(exception.detail)
        if exception.status_code == 404 and message == "Not Found" and request is not None:
            # Path and query string as the client sent them, without scheme and host
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            message = f"Not found - {target}"

        ErrorHandlerService._log(
            exception.status_code,
            f"HTTP Exception: {exception.status_code} - {message}",
            request
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=ErrorHandlerService.format_error_response(message=message),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle unexpected errors.

        Production responses carry a generic message only; other
        environments expose the message and traceback.

        Args:
            exception: Unexpected exception
            request: Optional FastAPI request object

        Returns:
            500 JSON response
        """
        ErrorHandlerService._log(
            500,
            f"Unexpected Error: {type(exception).__name__} - {exception}",
            request,
            exception_type=type(exception).__name__
        )

        if settings.is_production:
            error_response = ErrorHandlerService.format_error_response(message="Internal server error")
        else:
            stack = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
            error_response = ErrorHandlerService.format_error_response(
                message=str(exception) or "Internal server error",
                stack=stack
            )

        return JSONResponse(status_code=500, content=error_response)

"""
Custom Exceptions for the Hostel Grievance Portal

This module defines custom exception classes used throughout the application
for better error handling and debugging, together with the FastAPI handlers
that turn them into JSON error responses.
"""

import logging
from typing import Any, Dict, List, Optional
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Access denied. Please ensure you're logged in as an admin."


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    ACCESS_DENIED = "ACCESS_DENIED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"

    # External service errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    UPSTREAM_HTTP_ERROR = "UPSTREAM_HTTP_ERROR"
    STALE_RESPONSE = "STALE_RESPONSE"

    # Storage errors
    STORAGE_ERROR = "STORAGE_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)
        self.field_errors = field_errors or {}


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        redirect_to: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        if redirect_to:
            details["redirect"] = redirect_to
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


# ========================================
# Authentication & Authorization Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when authentication fails"""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: ErrorCode = ErrorCode.AUTHENTICATION_FAILED,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 401)


class AuthorizationError(BaseAppException):
    """Exception raised when the session role does not allow an action"""

    def __init__(
        self,
        message: str = "Access denied",
        required_role: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.AUTHORIZATION_FAILED
    ):
        details = {"required_role": required_role} if required_role else {}
        super().__init__(message, error_code, details, 403)


# ========================================
# Upstream API Exceptions
# ========================================

class ExternalServiceError(BaseAppException):
    """Exception raised when the upstream API cannot be reached"""

    def __init__(
        self,
        message: str = "External service error",
        service_name: Optional[str] = None,
        endpoint: Optional[str] = None,
        status_code: int = 503,
        error_code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR
    ):
        details = {
            "service_name": service_name,
            "endpoint": endpoint
        }
        super().__init__(message, error_code, details, status_code)


class UpstreamAPIError(ExternalServiceError):
    """
    Non-2xx response from the hostel REST API.

    The message keeps the upstream status visible, e.g.
    ``HTTP 500 on GET /admin/complaints: boom``.
    """

    def __init__(
        self,
        upstream_status: int,
        method: str,
        path: str,
        detail: str
    ):
        message = f"HTTP {upstream_status} on {method} {path}: {detail}"
        status_code = upstream_status if 400 <= upstream_status < 500 else 502
        super().__init__(
            message,
            service_name="hostel-api",
            endpoint=path,
            status_code=status_code,
            error_code=ErrorCode.UPSTREAM_HTTP_ERROR
        )
        self.upstream_status = upstream_status
        self.method = method
        self.path = path
        self.detail = detail
        self.details["upstream_status"] = upstream_status


class AccessDeniedError(UpstreamAPIError):
    """403 from the upstream API, reported with a dedicated message"""

    def __init__(self, method: str, path: str, detail: str):
        super().__init__(403, method, path, detail)
        self.message = ACCESS_DENIED_MESSAGE
        self.error_code = ErrorCode.ACCESS_DENIED
        self.args = (self.message,)


class StaleResponseError(BaseAppException):
    """A fetch finished after a newer one had started; its result is discarded"""

    def __init__(self, view: str, generation: int, current: int):
        super().__init__(
            f"Discarded stale response for {view} (generation {generation}, current {current})",
            ErrorCode.STALE_RESPONSE,
            {"view": view, "generation": generation, "current": current},
            409
        )


class StorageError(BaseAppException):
    """Exception raised when the local key-value store fails"""

    def __init__(
        self,
        message: str = "Storage operation failed",
        operation: Optional[str] = None,
        key: Optional[str] = None
    ):
        details = {
            "operation": operation,
            "key": key
        }
        super().__init__(message, ErrorCode.STORAGE_ERROR, details, 503)


# ========================================
# Utility Functions
# ========================================

def create_validation_error(field_errors: Dict[str, List[str]]) -> ValidationError:
    """Create a validation error with field-specific errors"""
    total_errors = sum(len(errors) for errors in field_errors.values())
    message = f"Validation failed with {total_errors} error(s)"
    return ValidationError(message, field_errors)


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """Render any application exception as its JSON error payload"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"{exc.__class__.__name__}: {exc.message}",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "error_code": exc.error_code.value,
            "status_code": exc.status_code,
        }
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application exception handlers to the FastAPI app"""
    app.add_exception_handler(BaseAppException, app_exception_handler)


__all__ = [
    'ErrorCode',
    'ACCESS_DENIED_MESSAGE',
    'BaseAppException',
    'ValidationError',
    'ResourceNotFoundError',
    'AuthenticationError',
    'AuthorizationError',
    'ExternalServiceError',
    'UpstreamAPIError',
    'AccessDeniedError',
    'StaleResponseError',
    'StorageError',
    'create_validation_error',
    'app_exception_handler',
    'register_exception_handlers',
]

"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from typing import Any, Dict

logger = logging.getLogger("omnibus.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class CapacityExceededError(AppException):
    """Raised when a booking would overcommit the vehicle of a schedule."""

    def __init__(self, schedule_id: int, travel_date: Any, requested_seats: int, available_seats: int):
        super().__init__(
            message=f"Not enough seats available: requested {requested_seats}, available {available_seats}",
            error_code="ERR_CAPACITY_001",
            status_code=status.HTTP_409_CONFLICT,
            details={
                "schedule_id": schedule_id,
                "travel_date": str(travel_date),
                "requested_seats": requested_seats,
                "available_seats": available_seats
            }
        )


class InvalidStateError(AppException):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(self, resource: str, current_status: str, action: str):
        super().__init__(
            message=f"Cannot {action} {resource} in status '{current_status}'",
            error_code="ERR_STATE_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource": resource, "current_status": current_status, "action": action}
        )


class InvalidPackageTypeError(AppException):
    """Raised for unrecognized subscription packages."""

    def __init__(self, package_type: Any, allowed: list):
        super().__init__(
            message=f"Unknown subscription package '{package_type}'",
            error_code="ERR_PACKAGE_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"package_type": package_type, "allowed": allowed}
        )


class BookingValidationError(AppException):
    """Raised when a request is well-formed but semantically invalid."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": jsonable_encoder(exc.details)
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        409: "ERR_CONFLICT",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_encoder(exc.errors())
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    correlation_id = getattr(request.state, "correlation_id", None)
    logger.exception(
        "Unhandled exception on %s %s [%s]: %s: %s",
        request.method, request.url.path, correlation_id, type(exc).__name__, exc
    )

    details = {"correlation_id": correlation_id} if correlation_id else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": details
        }
    )

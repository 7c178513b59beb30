"""Centralized error responses for the dashboard API."""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class DashboardError:
    """Standard error codes for the dashboard API."""

    UNKNOWN_COIN = "UNKNOWN_COIN"
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    HTTP_ERROR = "HTTP_ERROR"


class ErrorResponse:
    """Standardized error response format."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | list[str] | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        """
        Initialize error response.

        Args:
            error_code: Standard error code from DashboardError
            message: Human-readable error message
            details: Additional error details (field-specific errors, allowed values)
            status_code: HTTP status code
        """
        self.error_code = error_code
        self.message = message
        self.details = details
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        response = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


def create_unknown_coin_error(coin_id: str, allowed: list[str]) -> ErrorResponse:
    return ErrorResponse(
        error_code=DashboardError.UNKNOWN_COIN,
        message=f"Unknown coin: {coin_id}",
        details={"allowed": allowed},
    )


def create_invalid_range_error(days: int, allowed: list[int]) -> ErrorResponse:
    return ErrorResponse(
        error_code=DashboardError.INVALID_TIME_RANGE,
        message=f"Unsupported time range: {days} days",
        details={"allowed": allowed},
    )


def create_validation_error_response(errors: list[dict[str, Any]]) -> ErrorResponse:
    """
    Create standardized validation error response from Pydantic validation errors.

    Args:
        errors: List of validation errors from Pydantic

    Returns:
        ErrorResponse with field-specific validation errors
    """
    field_errors = {}
    for error in errors:
        field_path = ".".join(str(loc) for loc in error["loc"])
        field_errors[field_path] = error["msg"]

    return ErrorResponse(
        error_code=DashboardError.VALIDATION_ERROR,
        message="Validation failed for one or more fields",
        details=field_errors,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI validation errors in the standard format."""
    error_response = create_validation_error_response(exc.errors())
    return JSONResponse(status_code=error_response.status_code, content=error_response.to_dict())


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Unwrap ErrorResponse payloads so clients see {"error", "message"} at top level."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = {"error": DashboardError.HTTP_ERROR, "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

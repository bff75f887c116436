# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries an HTTP status, a machine-readable code and, where
# possible, a suggestion telling the caller how to fix it.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class TrackAuraException(Exception):
    """
    Base exception for the TrackAura API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "TRACKAURA_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "error": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class BadRequestError(TrackAuraException):
    """Raised when required input is missing or malformed."""

    def __init__(self, message: str, suggestion: str | None = None, **details: Any):
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


# =============================================================================
# Catalog Exceptions
# =============================================================================

class CategoryNotFoundError(TrackAuraException):
    """Raised when a teaser request names a category that doesn't exist."""

    def __init__(self, category: str, available: list[str] | None = None):
        super().__init__(
            message="Category not found",
            code="CATEGORY_NOT_FOUND",
            status_code=404,
            suggestion="Use a category slug from GET /api/v1/categories",
            details={"category": category, "available": available or []},
        )


class SubCategoryNotFoundError(TrackAuraException):
    """Raised when a sub-category doesn't exist inside its main category."""

    def __init__(self, sub_category: str, category: str):
        super().__init__(
            message="Sub-category not found",
            code="SUB_CATEGORY_NOT_FOUND",
            status_code=404,
            suggestion=f"Check the sub-categories listed under '{category}'",
            details={"sub_category": sub_category, "category": category},
        )


# =============================================================================
# Upstream Exceptions
# =============================================================================

class UpstreamUnavailableError(TrackAuraException):
    """Raised when an external API answers non-2xx or can't be reached."""

    def __init__(self, service: str, status: int | None = None, error: str | None = None):
        label = f"{service} error ({status})" if status else f"{service} unavailable"
        details: dict[str, Any] = {"service": service}
        if status is not None:
            details["status"] = status
        if error:
            details["error"] = error
        super().__init__(
            message=label,
            code="UPSTREAM_UNAVAILABLE",
            status_code=502,
            suggestion="Try again later; the upstream service did not answer",
            details=details,
        )


class MalformedUpstreamResponseError(TrackAuraException):
    """Raised when an upstream answer can't be parsed into the expected shape."""

    def __init__(self, service: str, error: str):
        super().__init__(
            message=f"{service} JSON parse failed",
            code="MALFORMED_UPSTREAM_RESPONSE",
            status_code=502,
            suggestion="The upstream answer was not valid JSON of the expected shape; retry the request",
            details={"service": service, "error": error},
        )


class IncompleteUpstreamDataError(TrackAuraException):
    """Raised when a parsed upstream payload lacks required fields."""

    def __init__(self, service: str, missing: list[str]):
        super().__init__(
            message=f"Incomplete {service} data",
            code="INCOMPLETE_UPSTREAM_DATA",
            status_code=502,
            suggestion="The item may be too obscure to price; try a more specific name",
            details={"service": service, "missing": missing},
        )


# =============================================================================
# Server Exceptions
# =============================================================================

class ConfigurationError(TrackAuraException):
    """Raised when a required setting (usually an API key) is missing."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"{setting} missing",
            code="CONFIGURATION_ERROR",
            status_code=500,
            suggestion=f"Add {setting} to your .env file",
            details={"setting": setting},
        )


class BackendError(TrackAuraException):
    """Raised when a Supabase query or auth call fails."""

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(
            message=message,
            code="BACKEND_ERROR",
            status_code=status_code,
            suggestion=suggestion,
            details=details,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def trackaura_exception_handler(
    request: Request,
    exc: TrackAuraException
) -> JSONResponse:
    """
    Convert TrackAuraException to JSON response.

    Returns structured error with:
    - error: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )

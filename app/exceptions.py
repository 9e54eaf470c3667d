# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the catalog API.
# Every error carries a machine-readable code, an HTTP status, an actionable
# suggestion and structured details so the UI can point at the failing
# item or image.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class HanarException(Exception):
    """
    Base exception for the Hanar catalog API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "HANAR_ERROR",
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

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Business Exceptions
# =============================================================================

class BusinessNotFoundError(HanarException):
    """Raised when a business ID doesn't exist."""

    def __init__(self, business_id: str):
        super().__init__(
            message=f"Business not found: {business_id}",
            code="BUSINESS_NOT_FOUND",
            status_code=404,
            suggestion="Check that the business_id is correct and the business hasn't been archived",
            details={"business_id": business_id}
        )


# =============================================================================
# Catalog Exceptions
# =============================================================================

class CatalogError(HanarException):
    """
    Base class for failures of one catalog submission.

    `item_id` and `image_id` identify what failed, when applicable.
    """

    def __init__(
        self,
        message: str,
        code: str = "CATALOG_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        item_id: str | None = None,
        image_id: str | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            suggestion=suggestion,
            details=details,
        )
        self.item_id = item_id
        self.image_id = image_id

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.item_id:
            result["item_id"] = self.item_id
        if self.image_id:
            result["image_id"] = self.image_id
        return result


class LimitExceededError(CatalogError):
    """Raised when a staged add would exceed a plan limit."""

    def __init__(self, message: str, limit: int, current: int, requested: int, item_id: str | None = None):
        super().__init__(
            message=message,
            code="LIMIT_EXCEEDED",
            status_code=403,
            suggestion="Remove some entries or upgrade your plan",
            details={"limit": limit, "current": current, "requested": requested},
            item_id=item_id,
        )


class UploadFailureError(CatalogError):
    """Raised when a media upload fails. Nothing is written to the database."""

    def __init__(
        self,
        error: str,
        item_id: str | None = None,
        image_id: str | None = None,
        filename: str | None = None,
        uploaded_paths: list[str] | None = None,
    ):
        name = filename or "image"
        super().__init__(
            message=f"Failed to upload {name}: {error}",
            code="UPLOAD_FAILURE",
            status_code=502,
            suggestion="Submit the catalog again; no catalog rows were changed",
            details={
                "error": error,
                "filename": filename,
                "uploaded_paths": uploaded_paths or [],
            },
            item_id=item_id,
            image_id=image_id,
        )


class PersistenceFailureError(CatalogError):
    """Raised when a row insert/update/delete fails."""

    def __init__(self, operation: str, table: str, error: str, item_id: str | None = None):
        super().__init__(
            message=f"Failed to {operation} {table}: {error}",
            code="PERSISTENCE_FAILURE",
            status_code=500,
            suggestion="Submit the catalog again; completed steps are safe to repeat",
            details={"operation": operation, "table": table, "error": error},
            item_id=item_id,
        )


class CascadeFailureError(CatalogError):
    """Raised when purging an abandoned catalog kind only partially completed."""

    def __init__(self, kind: str, stage: str, error: str, purged: list[str] | None = None):
        super().__init__(
            message=f"Failed to clear {kind} catalog during {stage}: {error}",
            code="CASCADE_FAILURE",
            status_code=500,
            suggestion="Submit again to finish clearing the previous catalog",
            details={"kind": kind, "stage": stage, "error": error, "purged": purged or []},
        )


class ConflictError(CatalogError):
    """Raised when the catalog changed since the edit session loaded it."""

    def __init__(self, kind: str, expected_version: str, actual_version: str):
        super().__init__(
            message=f"The {kind} catalog was changed by another session",
            code="CONFLICT",
            status_code=409,
            suggestion="Reload the catalog and apply your edits again",
            details={
                "kind": kind,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class InvalidCatalogError(CatalogError):
    """Raised when the staged tree itself is malformed."""

    def __init__(self, message: str, item_id: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_CATALOG",
            status_code=400,
            suggestion="Reload the editor and try again",
            details=details,
            item_id=item_id,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def hanar_exception_handler(
    request: Request,
    exc: HanarException
) -> JSONResponse:
    """Convert HanarException to JSON response."""
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
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )

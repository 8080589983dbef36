"""Shared exception classes and handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}
        super().__init__(self.message)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": errors or []},
        )


class MediaStorageException(AppException):
    """Upload or delete failed on the server side."""

    def __init__(
        self,
        message: str,
        kind: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            detail={"kind": kind},
        )


async def app_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle AppException and return JSON response."""
    if isinstance(exc, AppException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "detail": exc.detail,
            },
        )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": {}},
    )

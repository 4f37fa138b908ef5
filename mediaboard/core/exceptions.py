# mediaboard/core/exceptions.py
from __future__ import annotations

"""
Mediaboard — Application Exceptions
===================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the
problem+json shape rendered by `mediaboard.core.exception_handlers`.

Key ideas
---------
- One base `AppException` that carries a `code` and machine-readable `details`.
- Domain exceptions inherit from it and set sane defaults.
- Storage failures are *not* HTTP errors: `StorageError` is raised by the image
  backends and surfaces as a 500 through the global handler.

Usage
-----
    raise RequestValidationFailed("Title is required.", field="title")
    raise NotFoundException("Movie", 42)
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "RequestValidationFailed",
    "NotFoundException",
    "StorageError",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """HTTP error rendered as problem+json with `code` and `details`.

    `message` doubles as the problem `detail`; `code` defaults to the status.
    `details` is client-visible, so keep it to field names and limits.
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details


# ──────────────────────────────────────────────────────────────
# 🧾 Request-level domain exceptions
# ──────────────────────────────────────────────────────────────
class RequestValidationFailed(AppException):
    """Business-rule validation failure (400); raised before any side effect."""

    def __init__(self, message: str, *, field: Optional[str] = None, details: Optional[Any] = None) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=message,
            details=details if details is not None else ({"field": field} if field else None),
        )
        self.field = field


class NotFoundException(AppException):
    """Unknown resource id (404)."""

    def __init__(self, resource: str, resource_id: Any) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            message=f"{resource} not found",
            details={"id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


# ──────────────────────────────────────────────────────────────
# 🗄️ Storage
# ──────────────────────────────────────────────────────────────
class StorageError(RuntimeError):
    """Raised when an image backend cannot store an object."""

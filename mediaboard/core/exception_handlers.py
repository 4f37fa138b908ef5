from __future__ import annotations

"""
Problem+JSON exception handlers (RFC 7807).

`mediaboard.main.create_app` installs these. All HTTP errors are rendered as
application/problem+json with a stable schema; `AppException` subclasses add
their `code` and `details`.
"""

import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediaboard.core.exceptions import AppException
from mediaboard.middleware.request_id import HEADER_NAME, get_request_id

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _problem(title: str, detail: str, status_code: int, request: Request, **extra) -> JSONResponse:
    content = {
        "type": "about:blank",
        "title": title,
        "detail": detail,
        "status": status_code,
        "instance": str(request.url),
    }
    content.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        media_type=PROBLEM_JSON,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    headers = getattr(exc, "headers", None)
    if isinstance(exc, AppException):
        resp = _problem(title, detail, exc.status_code, request, code=exc.code, details=exc.details)
    else:
        resp = _problem(title, detail, exc.status_code, request)
    if headers:
        resp.headers.update(headers)
    return resp


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    detail = "Validation error"
    return _problem(
        detail,
        detail,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        request,
        errors=exc.errors(),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    # Hide internals from clients; keep the stack trace in logs.
    request_id = get_request_id(request)
    logger.exception("Unhandled error on %s %s (request_id=%s)", request.method, request.url.path, request_id)
    resp = _problem(
        "Internal Server Error",
        "An unexpected error occurred.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        request,
        request_id=request_id or None,
    )
    # ServerErrorMiddleware sends this response outside RequestIDMiddleware.
    if request_id:
        resp.headers[HEADER_NAME] = request_id
    return resp


__all__ = [
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]

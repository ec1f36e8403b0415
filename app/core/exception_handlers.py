"""
Exception handlers that give every error the same JSON shape:
``{"detail", "code"}`` plus ``field``/``metadata`` where known.

Each error response carries an ``X-Request-ID`` header. A client-supplied
request id is echoed back so a failed match or relay call can be traced
across client and server logs.
"""

import logging
import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64

STATUS_TO_CODE: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTH_NOT_AUTHENTICATED,
    403: ErrorCode.AUTHZ_FORBIDDEN,
    404: ErrorCode.RESOURCE_NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    409: ErrorCode.RESOURCE_CONFLICT,
    413: ErrorCode.CONTENT_TOO_LONG,
    422: ErrorCode.VALIDATION_ERROR,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.SERVER_UNAVAILABLE,
    503: ErrorCode.SERVER_UNAVAILABLE,
}


def request_id_for(request: Request) -> str:
    """Echo the caller's request id, or make a short one."""
    supplied = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if supplied:
        return supplied[:MAX_REQUEST_ID_LENGTH]
    return uuid.uuid4().hex[:8]


def error_response(
    status_code: int,
    body: dict[str, Any],
    request_id: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body,
        headers={**(headers or {}), REQUEST_ID_HEADER: request_id},
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    request_id = request_id_for(request)

    # 5xx here is MatchingFailedError and similar
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        "%s %s -> %d %s: %s (request_id=%s)",
        request.method,
        request.url.path,
        exc.status_code,
        exc.code.value,
        exc.message,
        request_id,
    )

    return error_response(exc.status_code, exc.to_dict(), request_id, exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Body, query and form validation failures.

    ``field`` names the first offending input (e.g. ``interests`` or
    ``audio``) so clients can treat these like service-level
    ValidationErrors.
    """
    request_id = request_id_for(request)
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]

    logger.info(
        "%s %s -> 422 request validation: %s (request_id=%s)",
        request.method,
        request.url.path,
        errors,
        request_id,
    )

    body: dict[str, Any] = {
        "detail": errors,
        "code": ErrorCode.VALIDATION_ERROR.value,
    }
    if errors and errors[0]["loc"]:
        body["field"] = str(errors[0]["loc"][-1])

    return error_response(422, body, request_id)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Starlette/FastAPI HTTP errors (unknown routes, wrong methods, auth scheme)."""
    request_id = request_id_for(request)
    error_code = STATUS_TO_CODE.get(exc.status_code, ErrorCode.SERVER_ERROR)

    logger.info(
        "%s %s -> %d: %s (request_id=%s)",
        request.method,
        request.url.path,
        exc.status_code,
        exc.detail,
        request_id,
    )

    body: dict[str, Any] = {
        "detail": exc.detail or "An error occurred",
        "code": error_code.value,
    }
    return error_response(exc.status_code, body, request_id, exc.headers)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = request_id_for(request)

    logger.exception(
        "Unhandled exception on %s %s (request_id=%s)",
        request.method,
        request.url.path,
        request_id,
    )

    body: dict[str, Any] = {
        "detail": "Internal server error. Please try again later.",
        "code": ErrorCode.SERVER_ERROR.value,
    }
    return error_response(500, body, request_id)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

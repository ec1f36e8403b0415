"""
Custom exception classes for the Anonchat application.
Provides structured error handling with machine-readable error codes.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes matching frontend for consistency"""

    # Authentication errors (401)
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_NOT_AUTHENTICATED = "AUTH_NOT_AUTHENTICATED"

    # Authorization errors (403)
    AUTHZ_FORBIDDEN = "AUTHZ_FORBIDDEN"

    # Resource errors (404, 409)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    SESSION_CLOSED = "SESSION_CLOSED"

    # Validation errors (400, 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
    CONTENT_BLOCKED = "CONTENT_BLOCKED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500+)
    SERVER_ERROR = "SERVER_ERROR"
    SERVER_UNAVAILABLE = "SERVER_UNAVAILABLE"
    MATCHING_FAILED = "MATCHING_FAILED"


class AppException(Exception):
    """
    Base exception class for application errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SERVER_ERROR,
        status_code: int = 500,
        field: str | None = None,
        metadata: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.field = field
        self.metadata = metadata or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary"""
        response = {
            "detail": self.message,
            "code": self.code.value,
        }
        if self.field:
            response["field"] = self.field
        if self.metadata:
            response["metadata"] = self.metadata
        return response


# Authentication Errors (401)


class AuthenticationError(AppException):
    """Base authentication error"""

    def __init__(
        self,
        message: str = "Authentication required",
        code: ErrorCode = ErrorCode.AUTH_NOT_AUTHENTICATED,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
            headers={"WWW-Authenticate": "Bearer"},
        )


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self, message: str = "Session token has expired"):
        super().__init__(message=message, code=ErrorCode.AUTH_TOKEN_EXPIRED)


class TokenInvalidError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, code=ErrorCode.AUTH_TOKEN_INVALID)


# Authorization Errors (403)


class AuthorizationError(AppException):
    """Caller is authenticated but not a participant of the resource"""

    def __init__(self, message: str = "Not a participant of this session"):
        super().__init__(
            message=message,
            code=ErrorCode.AUTHZ_FORBIDDEN,
            status_code=403,
        )


# Resource Errors (404, 409)


class NotFoundError(AppException):
    """Resource not found"""

    def __init__(
        self,
        message: str = "Requested resource not found",
        resource: str | None = None,
    ):
        metadata = {"resource": resource} if resource else None
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            status_code=404,
            metadata=metadata,
        )


class ConflictError(AppException):
    """Resource conflict"""

    def __init__(
        self,
        message: str = "Resource state conflict",
        code: ErrorCode = ErrorCode.RESOURCE_CONFLICT,
        field: str | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            field=field,
        )


class SessionClosedError(ConflictError):
    """Session has ended and accepts no more writes"""

    def __init__(self, message: str = "Session is closed"):
        super().__init__(message=message, code=ErrorCode.SESSION_CLOSED)


# Validation Errors (400, 422)


class ValidationError(AppException):
    """Validation error"""

    def __init__(
        self,
        message: str = "Please check the submitted data",
        field: str | None = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        metadata: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            field=field,
            metadata=metadata,
        )


class ContentTooLongError(ValidationError):
    """Content exceeds the allowed length"""

    def __init__(self, max_length: int, field: str | None = "content"):
        super().__init__(
            message=f"Content is longer than {max_length} characters",
            field=field,
            code=ErrorCode.CONTENT_TOO_LONG,
            metadata={"max_length": max_length},
        )


class ContentBlockedError(AppException):
    """Content rejected by moderation"""

    def __init__(
        self,
        message: str = "Message blocked by moderation",
        reason: str | None = None,
    ):
        metadata = {"reason": reason} if reason else None
        super().__init__(
            message=message,
            code=ErrorCode.CONTENT_BLOCKED,
            status_code=400,
            metadata=metadata,
        )


# Rate Limiting (429)


class RateLimitError(AppException):
    """Rate limit exceeded"""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: int = 60,
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RATE_LIMIT_EXCEEDED,
            status_code=429,
            metadata={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


# Server Errors (500, 503)


class ServerError(AppException):
    """Internal server error"""

    def __init__(
        self,
        message: str = "Internal server error",
        code: ErrorCode = ErrorCode.SERVER_ERROR,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=500,
        )


class TransientStorageError(AppException):
    """Storage layer failed; safe to retry with backoff"""

    def __init__(
        self,
        message: str = "Storage temporarily unavailable",
        code: ErrorCode = ErrorCode.SERVER_UNAVAILABLE,
        retry_after: int = 2,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=503,
            metadata={"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class MatchingFailedError(TransientStorageError):
    """The matchmaking transaction could not be completed"""

    def __init__(self, message: str = "Matching failed, please retry"):
        super().__init__(message=message, code=ErrorCode.MATCHING_FAILED)

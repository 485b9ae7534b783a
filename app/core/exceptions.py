"""
Custom exception classes for the reports application.
Provides structured error handling with machine-readable error codes.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes shared with the frontend"""

    # Authentication errors (401)
    AUTH_TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_NOT_AUTHENTICATED = "AUTH_NOT_AUTHENTICATED"

    # Authorization errors (403)
    AUTHZ_FORBIDDEN = "AUTHZ_FORBIDDEN"
    AUTHZ_INSUFFICIENT_PERMISSIONS = "AUTHZ_INSUFFICIENT_PERMISSIONS"
    AUTHZ_ACCOUNT_SUSPENDED = "AUTHZ_ACCOUNT_SUSPENDED"

    # Resource errors (404, 409)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # Report workflow errors (409)
    REPORT_DUPLICATE = "REPORT_DUPLICATE"
    REPORT_INVALID_TRANSITION = "REPORT_INVALID_TRANSITION"

    # Validation errors (400, 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VALIDATION_REQUIRED_FIELD = "VALIDATION_REQUIRED_FIELD"

    # Moderation side effects (never returned to clients)
    ACTION_EXECUTION_FAILED = "ACTION_EXECUTION_FAILED"

    # Server errors (500+)
    SERVER_ERROR = "SERVER_ERROR"
    SERVER_UNAVAILABLE = "SERVER_UNAVAILABLE"


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
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.field = field
        self.metadata = metadata or {}
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
        )


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self, message: str = "Session has expired"):
        super().__init__(message=message, code=ErrorCode.AUTH_TOKEN_EXPIRED)


class TokenInvalidError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, code=ErrorCode.AUTH_TOKEN_INVALID)


# Authorization Errors (403)


class AuthorizationError(AppException):
    """Base authorization error"""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        code: ErrorCode = ErrorCode.AUTHZ_FORBIDDEN,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=403,
        )


class InsufficientPermissionsError(AuthorizationError):
    """User lacks required permissions"""

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message=message, code=ErrorCode.AUTHZ_INSUFFICIENT_PERMISSIONS)


class AccountSuspendedError(AuthorizationError):
    """Suspended accounts cannot use the API"""

    def __init__(self, message: str = "This account has been suspended"):
        super().__init__(message=message, code=ErrorCode.AUTHZ_ACCOUNT_SUSPENDED)


# Resource Errors (404, 409)


class NotFoundError(AppException):
    """Entity not found"""

    def __init__(
        self,
        message: str = "The requested item was not found",
        resource: str | None = None,
    ):
        metadata = {"resource": resource} if resource else None
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            status_code=404,
            metadata=metadata,
        )


class ResourceNotFoundError(NotFoundError):
    """Reported resource does not exist"""

    def __init__(self, message: str = "The specified resource does not exist"):
        super().__init__(message=message, resource="resource")


class ReportNotFoundError(NotFoundError):
    """Report does not exist"""

    def __init__(self, message: str = "Report not found"):
        super().__init__(message=message, resource="report")


class ConflictError(AppException):
    """State conflict"""

    def __init__(
        self,
        message: str = "The request conflicts with the current state",
        code: ErrorCode = ErrorCode.RESOURCE_CONFLICT,
        field: str | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            field=field,
            metadata=metadata,
        )


class DuplicateReportError(ConflictError):
    """Reporter already has a live report on the resource"""

    def __init__(
        self,
        message: str = "You have already reported this resource. Only one open report per resource is allowed.",
    ):
        super().__init__(
            message=message,
            code=ErrorCode.REPORT_DUPLICATE,
            field="resource_id",
        )


class InvalidTransitionError(ConflictError):
    """Status change not allowed from the current status"""

    def __init__(
        self,
        current_status: str,
        new_status: str,
        message: str | None = None,
    ):
        super().__init__(
            message=message or f"Invalid status transition: {current_status} -> {new_status}",
            code=ErrorCode.REPORT_INVALID_TRANSITION,
            field="status",
            metadata={"from": current_status, "to": new_status},
        )


# Validation Errors (400, 422)


class ValidationError(AppException):
    """Validation error"""

    def __init__(
        self,
        message: str = "Please check the submitted data",
        field: str | None = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            field=field,
        )


class RequiredFieldError(ValidationError):
    """Required field missing"""

    def __init__(
        self,
        message: str = "This field is required",
        field: str | None = None,
    ):
        super().__init__(
            message=message,
            field=field,
            code=ErrorCode.VALIDATION_REQUIRED_FIELD,
        )


# Server Errors (500, 503)


class ActionExecutionError(AppException):
    """A moderation side effect could not be carried out"""

    def __init__(self, report_id: int, action: str, message: str):
        super().__init__(
            message=message,
            code=ErrorCode.ACTION_EXECUTION_FAILED,
            status_code=500,
            metadata={"report_id": report_id, "action": action},
        )


class StoreUnavailableError(AppException):
    """Database timed out or is unreachable; safe to retry"""

    def __init__(self, message: str = "The service is temporarily unavailable. Please retry."):
        super().__init__(
            message=message,
            code=ErrorCode.SERVER_UNAVAILABLE,
            status_code=503,
            metadata={"retryable": True},
        )

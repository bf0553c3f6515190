# composition_service/domain/exceptions.py

"""
Domain exceptions.

Every exception carries the HTTP status and the internal code used by
ErrorHandlerMiddleware to build the error payload.
"""

from typing import Any, Optional


class DomainException(Exception):
    """Base class for all domain errors."""

    status_code: int = 400
    internal_code: str = "DOMAIN_ERROR"
    default_message: str = "Domain error."

    def __init__(
            self,
            message: Optional[str] = None,
            status_code: Optional[int] = None,
            internal_code: Optional[str] = None,
            details: Any = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        if internal_code is not None:
            self.internal_code = internal_code
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class UnauthorizedException(DomainException):
    status_code = 401
    internal_code = "UNAUTHORIZED"
    default_message = "Authentication required."


class InvalidTokenException(UnauthorizedException):
    internal_code = "INVALID_TOKEN"
    default_message = "Invalid token."


class InvalidCredentialsException(UnauthorizedException):
    internal_code = "INVALID_CREDENTIALS"
    default_message = "Invalid login or password."


class PermissionDeniedException(DomainException):
    status_code = 403
    internal_code = "FORBIDDEN"
    default_message = "Permission denied."


class ResourceNotFoundException(DomainException):
    status_code = 404
    internal_code = "NOT_FOUND"
    default_message = "Resource not found."

    def __init__(self, message: Optional[str] = None, resource_id: Any = None):
        super().__init__(
            message=message,
            details={"resource_id": resource_id} if resource_id is not None else None,
        )
        self.resource_id = resource_id


class ResourceAlreadyExistsException(DomainException):
    status_code = 409
    internal_code = "ALREADY_EXISTS"
    default_message = "Resource already exists."

    def __init__(self, detail: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message=message or detail)


class InvalidTransitionException(DomainException):
    """Raised when a workflow operation is not allowed from the current status."""
    status_code = 409
    internal_code = "INVALID_TRANSITION"
    default_message = "Operation not allowed in the current status."

    def __init__(self, message: Optional[str] = None, current_status: Optional[str] = None,
                 operation: Optional[str] = None):
        details = None
        if current_status is not None or operation is not None:
            details = {"current_status": current_status, "operation": operation}
        super().__init__(message=message, details=details)
        self.current_status = current_status
        self.operation = operation


class ValidationException(DomainException):
    status_code = 422
    internal_code = "VALIDATION_ERROR"
    default_message = "Invalid data."


class SessionStoreUnavailableException(DomainException):
    status_code = 503
    internal_code = "SERVICE_UNAVAILABLE"
    default_message = "Session store unavailable."

    def __init__(self, message: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(message=message)
        self.original_error = original_error


class DatabaseOperationException(DomainException):
    status_code = 500
    internal_code = "DATABASE_ERROR"
    default_message = "Database operation failed."

    def __init__(self, message: Optional[str] = None, original_error: Optional[Exception] = None):
        super().__init__(message=message)
        self.original_error = original_error

"""
Exception hierarchy for the listing API.

Every error the API reports deliberately is an ``APIException``; the class
fixes the HTTP status and the machine-readable ``error_code`` that appear
in the error body, and the instance carries the message.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_SERVER_ERROR"
    default_detail: str = "Internal server error"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=type(self).headers
        )


class ValidationError(APIException):
    """Input rejected by a service rule; ``field_errors`` end up in ``details``."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
    default_detail = "Validation failed"

    def __init__(self, detail: Optional[str] = None, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        suffix = f" with ID: {resource_id}" if resource_id else ""
        super().__init__(f"{resource} not found{suffix}")


class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    default_detail = "Authentication required"
    headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"
    default_detail = "Access forbidden"


class DuplicateEmailError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "DUPLICATE_EMAIL"
    default_detail = "Email already registered"


class StoreUnavailableError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "STORE_UNAVAILABLE"
    default_detail = "Database unavailable"


# Authentication
class InvalidCredentialsError(UnauthorizedError):
    default_detail = "Invalid email or password"


class TokenExpiredError(UnauthorizedError):
    default_detail = "Token has expired"


class InvalidTokenError(UnauthorizedError):
    default_detail = "Invalid token"


class InactiveUserError(ForbiddenError):
    default_detail = "User account is inactive"


class InsufficientPermissionsError(ForbiddenError):
    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# Entities
class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: Optional[str] = None):
        super().__init__("User", user_id)


class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: Optional[str] = None):
        super().__init__("Property", property_id)


class ScheduleNotFoundError(NotFoundError):
    def __init__(self, schedule_id: Optional[str] = None):
        super().__init__("Schedule", schedule_id)


class PropertyOwnershipError(ForbiddenError):
    default_detail = "You don't own this property"


class NoAssignedAgentError(ValidationError):
    default_detail = "Property has no assigned agent"


class InvalidStatusError(ValidationError):
    """Status value outside the allowed set."""

    def __init__(self, value: Any, allowed: List[str]):
        super().__init__(
            "Invalid status",
            field_errors=[{"field": "status", "message": f"'{value}' is not one of: {', '.join(allowed)}"}]
        )


class StatusTransitionError(ValidationError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change status from {current} to {requested}")


# Uploads
class FileUploadError(ValidationError):
    def __init__(self, detail: str):
        super().__init__(f"File upload error: {detail}")


class UnsupportedFileTypeError(ValidationError):
    def __init__(self, file_type: str, supported_types: List[str]):
        super().__init__(
            f"Unsupported file type '{file_type}'. Supported types: {', '.join(supported_types)}"
        )


class FileSizeExceededError(ValidationError):
    def __init__(self, size: int, max_size: int):
        super().__init__(f"File size {size} bytes exceeds maximum allowed size {max_size} bytes")

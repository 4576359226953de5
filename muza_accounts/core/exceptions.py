"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. Machine-readable error codes for conflict outcomes (EMAIL_EXISTS, ...)
4. No sensitive data leaks in error messages (OWASP A04)

IMPORTANT: NEVER use base Exception class. Always use custom exceptions.
"""

from typing import Any, Dict, Optional

from muza_accounts.core.config import settings


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: Centralizing exception handling in a base class ensures consistent
    error responses, HTTP status code mapping, and prevents sensitive data
    leaks in error messages.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"
    error_code: Optional[str] = None
    expose_details: bool = True

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable (localized) error message
            status_code: HTTP status code (overrides class default)
            error_code: Machine-readable code clients can branch on
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        # WHY: Filter out sensitive fields to prevent data leaks
        sensitive_fields = {
            "password",
            "old_password",
            "new_password",
            "token",
            "secret",
            "key",
            "api_key",
            "code",
            "verification_code",
        }
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }
        if not self.expose_details:
            filtered_context = {}

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "code": self.error_code,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Authentication & Authorization Exceptions (OWASP A07)
# ============================================================================


class AuthenticationError(AppException):
    """
    Raised when authentication fails.

    HTTP Status: 401 Unauthorized
    """

    status_code = 401
    default_message = "Authentication failed"


class AuthorizationError(AppException):
    """
    Raised when user lacks permissions for an action.

    WHY: Acting on another user's account (mismatched body id) is a 403,
    not a validation failure.

    HTTP Status: 403 Forbidden
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is malformed or has invalid signature."""

    default_message = "Token is invalid"


# ============================================================================
# Validation & Input Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails (missing or malformed fields).

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


class InputError(ValidationError):
    """
    Raised when input is malformed or doesn't meet constraints.

    WHY: More specific than ValidationError for cases where input format
    is incorrect (invalid email format, password too short, bad upload).
    """

    default_message = "Invalid input"


class ConflictError(ValidationError):
    """
    Raised when the request conflicts with current state.

    WHY: Email already in use, a code already pending or a rejected
    verification code are all client errors the frontend branches on,
    so they carry a machine-readable ``error_code`` and map to 400.

    HTTP Status: 400 Bad Request
    """

    default_message = "Request conflicts with current state"


class EmailExistsError(ConflictError):
    """The requested address is owned by another account."""

    error_code = "EMAIL_EXISTS"


class PendingEmailChangeError(ConflictError):
    """An unexpired email-change code is already outstanding."""

    error_code = "PENDING_EMAIL_CHANGE"


class PendingVerificationError(ConflictError):
    """An unexpired registration code is already outstanding."""

    error_code = "PENDING_VERIFICATION"


class InvalidVerificationCodeError(ConflictError):
    """The code is wrong, already used, or expired (indistinguishable)."""

    error_code = "INVALID_VERIFICATION_CODE"


class UserExistsError(ConflictError):
    """An account with the address appeared before the change was applied."""

    error_code = "USER_EXISTS"


class IncorrectPasswordError(ValidationError):
    """The supplied current password does not match the stored hash."""

    default_message = "Current password is incorrect"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class UserNotFoundError(ResourceNotFoundError):
    default_message = "User not found"


class ProductNotFoundError(ResourceNotFoundError):
    default_message = "Product not found"


class PurchaseNotFoundError(ResourceNotFoundError):
    default_message = "Purchased product not found"


# ============================================================================
# Downstream Exceptions
# ============================================================================


class DownstreamError(AppException):
    """
    Raised when a collaborator (mail transport, database, disk) fails.

    WHY: Clients get a generic 500; the raw cause is logged server-side and
    only exposed in ``details`` when EXPOSE_ERROR_DETAILS is enabled.

    HTTP Status: 500 Internal Server Error
    """

    status_code = 500
    default_message = "Internal server error"

    @property
    def expose_details(self) -> bool:  # type: ignore[override]
        return settings.EXPOSE_ERROR_DETAILS


class EmailServiceError(DownstreamError):
    """Raised when a verification email cannot be delivered."""

    default_message = "Failed to send verification email"


class DatabaseError(DownstreamError):
    default_message = "Database error"


class StorageError(DownstreamError):
    """Raised when an uploaded file cannot be written."""

    default_message = "File storage error"


# ============================================================================
# Rate Limiting
# ============================================================================


class RateLimitExceeded(AppException):
    """
    Raised when rate limit is exceeded.

    HTTP Status: 429 Too Many Requests
    """

    status_code = 429
    default_message = "Rate limit exceeded"

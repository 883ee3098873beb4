"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A small fixed set of error categories that map to HTTP statuses

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    │   └── InvalidIdentifierError - Malformed identifier presented to the store
    ├── NotFoundError - Resource not found
    ├── PermissionDeniedError - Authorization failures
    └── ExternalServiceError - Third-party service failures

Categories:
    Every exception class carries a ``category`` used by the presentation
    layer to pick a response status (see core.views.CATEGORY_STATUS):
    not_found, invalid_identifier, forbidden, validation, internal.
    Domain apps may add their own categories (e.g. chat's not_group_chat).

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Invalid email format")

    # Raise with error code for client handling
    raise ValidationError("Email already exists", error_code="EMAIL_DUPLICATE")

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=400)

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        category: Externally visible error category

    Example:
        try:
            chat = ChatService.load_chat(chat_id)
        except NotFoundError as e:
            logger.warning(f"Chat not found: {e.error_code}")
            return Response(e.to_dict(), status=404)
    """

    default_error_code: str = "APPLICATION_ERROR"
    category: str = "internal"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Chat not found",
                "error_code": "CHAT_NOT_FOUND",
                "details": {"chat_id": 123}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Invalid field formats
    - Business rule violations (group size limits, batch size limits)
    - Missing required fields

    Example:
        raise ValidationError(
            "Group must have at least 3 members",
            error_code="BELOW_MINIMUM_SIZE",
        )

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"
    category: str = "validation"


class InvalidIdentifierError(ValidationError):
    """
    Raised when a malformed identifier is presented to the store.

    Distinct from NotFoundError: the identifier could never resolve
    (wrong type or format), as opposed to a well-formed id with no row.

    Example:
        try:
            pk = int(raw_id)
        except (TypeError, ValueError):
            raise InvalidIdentifierError(f"Invalid chat id: {raw_id!r}")
    """

    default_error_code: str = "INVALID_IDENTIFIER"
    category: str = "invalid_identifier"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Use for:
    - Database record not found
    - External resource not found

    Example:
        chat = Chat.objects.filter(id=chat_id).first()
        if not chat:
            raise NotFoundError(
                "Chat not found",
                error_code="CHAT_NOT_FOUND",
                details={"chat_id": chat_id}
            )
    """

    default_error_code: str = "NOT_FOUND"
    category: str = "not_found"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when user lacks permission for an operation.

    Use for:
    - Unauthorized resource access
    - Role-based access control violations (not the creator, not a member)

    Example:
        if chat.creator_id != requester.id:
            raise PermissionDeniedError(
                "You are not allowed to rename the group",
                error_code="NOT_CHAT_CREATOR",
            )

    Note:
        For authentication failures (missing/invalid token), use DRF's
        AuthenticationFailed. Use this for authorization failures.
    """

    default_error_code: str = "PERMISSION_DENIED"
    category: str = "forbidden"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Object storage failures
    - Network timeouts
    - External service unavailability

    Example:
        try:
            storage.save(name, content)
        except OSError as e:
            raise ExternalServiceError(
                "Attachment storage unavailable",
                error_code="STORAGE_ERROR",
                details={"original_error": str(e)},
            )

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
    category: str = "internal"

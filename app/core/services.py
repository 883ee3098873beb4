"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: What every public service operation returns
    - Exceptions: Raised inside the domain (policies, loaders) and converted
      to ServiceResult at the service boundary via BaseService.fail()

Usage:
    from core.services import BaseService, ServiceResult

    class ChatService(BaseService):
        @classmethod
        def rename(cls, chat_id, name, requester) -> ServiceResult[Chat]:
            try:
                chat = cls.load_chat(chat_id)
                ...
            except BaseApplicationError as exc:
                return cls.fail(exc)
            return ServiceResult.success(chat)

    # In view
    result = ChatService.rename(chat_id, name, request.user)
    if result.success:
        return Response(ChatSerializer(result.data).data)
    return failure_response(result)

Related:
    - core.exceptions: Domain error hierarchy with categories
    - core.views: failure_response() maps categories to HTTP statuses
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        category: Error category (not_found, forbidden, validation, ...)

    Usage:
        # Success case
        return ServiceResult.success(chat)

        # Failure case
        return ServiceResult.failure(
            "Chat not found", "CHAT_NOT_FOUND", category="not_found"
        )

        # Check result
        result = ChatService.rename(chat_id, "New name", user)
        if result.success:
            chat = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    category: str | None = None

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        category: str = "internal",
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            category: Externally visible error category

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            category=category,
        )

    @classmethod
    def from_exception(cls, exc: BaseApplicationError) -> ServiceResult[T]:
        """
        Create a failed result from an application error.

        The result keeps the error's message, code and category.
        """
        return cls(
            success=False,
            error=exc.message,
            error_code=exc.error_code,
            category=exc.category,
        )


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception to ServiceResult conversion

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Public operations return ServiceResult
        - Collaborators (emitters, storages) are passed in, not looked up globally
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Example:
            with cls.atomic():
                chat.members.remove(user)
                chat.save(update_fields=["creator", "updated_at"])
        """
        with transaction.atomic():
            yield

    @classmethod
    def fail(cls, exc: BaseApplicationError) -> ServiceResult:
        """
        Convert an expected domain error into a failed ServiceResult.

        Logged at INFO since these are user-facing rule violations.
        """
        cls.get_logger().info(f"Rejected: {exc}")
        return ServiceResult.from_exception(exc)

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert an unexpected exception to ServiceResult with logging.

        Args:
            exc: The caught exception
            context: Additional context for logging
            log_level: Logging level (default ERROR)

        Returns:
            ServiceResult with category "internal"
        """
        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(log_level, message, exc_info=True)
        return ServiceResult.failure(
            "Internal server error",
            error_code="INTERNAL_ERROR",
            category="internal",
        )

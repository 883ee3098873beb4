"""
Core views providing infrastructure endpoints and response helpers.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks, plus the
single place where service-layer error categories become HTTP statuses.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import DatabaseError, connection
from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response

if TYPE_CHECKING:
    from core.services import ServiceResult

logger = logging.getLogger(__name__)

# Error category -> HTTP status
CATEGORY_STATUS: dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_identifier": status.HTTP_400_BAD_REQUEST,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "validation": status.HTTP_400_BAD_REQUEST,
    "not_group_chat": status.HTTP_400_BAD_REQUEST,
    "conflict": status.HTTP_409_CONFLICT,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def failure_response(result: ServiceResult) -> Response:
    """
    Build a DRF Response for a failed ServiceResult.

    Unknown categories are treated as internal errors.

    Example:
        result = ChatService.rename(pk, name, request.user)
        if not result.success:
            return failure_response(result)
    """
    status_code = CATEGORY_STATUS.get(
        result.category or "internal", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return Response(
        {
            "error": result.error,
            "error_code": result.error_code,
            "category": result.category,
        },
        status=status_code,
    )


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"

    HTTP Status Codes:
        200: All systems operational
        503: Database unreachable
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except DatabaseError:
        logger.warning("Health check: database unreachable", exc_info=True)
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)

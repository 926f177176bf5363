"""
API error rendering.

Every error leaving the API uses one envelope::

    {"error": {"code": "...", "message": "...", "details": ..., "timestamp": "..."}}

``details`` is omitted when there is nothing structured to add.
"""

import logging

from django.db import DatabaseError
from django.http import Http404
from django.utils import timezone
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from marketplace.domain.exceptions import MarketplaceError, StorageError

logger = logging.getLogger(__name__)

# DRF exception class -> envelope code
DRF_ERROR_CODES = {
    exceptions.ValidationError: "VALIDATION_ERROR",
    exceptions.ParseError: "VALIDATION_ERROR",
    exceptions.NotAuthenticated: "AUTHENTICATION_ERROR",
    exceptions.AuthenticationFailed: "AUTHENTICATION_ERROR",
    exceptions.PermissionDenied: "AUTHORIZATION_ERROR",
    exceptions.NotFound: "NOT_FOUND",
    exceptions.MethodNotAllowed: "METHOD_NOT_ALLOWED",
    exceptions.UnsupportedMediaType: "UNSUPPORTED_MEDIA_TYPE",
    exceptions.Throttled: "RATE_LIMITED",
}


def error_body(code: str, message: str, details=None) -> dict:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    error["timestamp"] = timezone.now().isoformat()
    return {"error": error}


def error_response(error: MarketplaceError) -> Response:
    return Response(error_body(error.code, error.message, error.details), status=error.status_code)


def _drf_code(exc) -> str:
    for exc_class in type(exc).__mro__:
        if exc_class in DRF_ERROR_CODES:
            return DRF_ERROR_CODES[exc_class]
    return str(getattr(exc, "default_code", "error")).upper()


def marketplace_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` rendering domain, framework and storage errors in the envelope."""
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else "unknown"

    if isinstance(exc, MarketplaceError):
        return error_response(exc)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, Http404):
            code, message, details = "NOT_FOUND", "Resource not found", None
        elif isinstance(exc, exceptions.ValidationError):
            code, message, details = "VALIDATION_ERROR", "Invalid request data", response.data
        else:
            code = _drf_code(exc)
            detail = getattr(exc, "detail", None)
            message, details = (str(detail) if detail is not None else str(exc)), None
        response.data = error_body(code, message, details)
        return response

    if isinstance(exc, DatabaseError):
        logger.error(f"Database error in {view_name}: {exc}", exc_info=True)
        return error_response(StorageError())

    logger.error(f"Unhandled exception in {view_name}: {exc}", exc_info=True)
    return Response(
        error_body("INTERNAL_ERROR", "An unexpected error occurred"), status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )

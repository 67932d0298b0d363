"""
Custom Exception Handler for API
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import exceptions, status
import logging

from apps.core.exceptions import StorefrontException

logger = logging.getLogger(__name__)


def _first_error(detail):
    """Pull a readable message out of a DRF error structure."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_error(value)
            if field in ('non_field_errors', 'detail'):
                return message
            return f"{field}: {message}"
    if isinstance(detail, list) and detail:
        return _first_error(detail[0])
    return str(detail)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that renders every error as
    ``{"success": false, "message": ...}``.
    """
    if isinstance(exc, StorefrontException):
        if exc.status_code >= 500:
            logger.exception(f"Storefront error: {exc.message}")
        else:
            logger.info(f"{exc.code}: {exc.message}")
        return Response(
            {"success": False, "message": exc.message, "code": exc.code},
            status=exc.status_code
        )

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        data = {
            "success": False,
            "message": _first_error(response.data),
        }
        if isinstance(exc, exceptions.ValidationError):
            data["errors"] = response.data
        response.data = data
    else:
        # Handle unexpected exceptions
        logger.exception(f"Unhandled exception: {exc}")
        response = Response(
            {
                "success": False,
                "message": "Internal server error",
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return response

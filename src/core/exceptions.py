"""API error translation.

Every API response error body has the shape
``{"success": false, "error": <message>, ...}``.  Known DRF/Django errors map
to their status codes; anything else is logged and becomes a generic 500.
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger("uniqverse")

GENERIC_ERROR_MESSAGE = "Internal server error"


class DomainError(Exception):
    """Business-rule violation surfaced to API clients as a 400."""

    default_message = "Invalid request"

    def __init__(self, message=None, *, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


def _validation_details(detail):
    if isinstance(detail, (dict, list)):
        return detail
    return {"non_field_errors": [str(detail)]}


def api_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` implementing the error taxonomy."""
    if isinstance(exc, DomainError):
        set_rollback()
        return Response(
            {"success": False, "error": exc.message, "details": exc.details},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(
            exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        )

    response = exception_handler(exc, context)
    if response is None:
        set_rollback()
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "API view",
            exc_info=exc,
        )
        return Response(
            {"success": False, "error": GENERIC_ERROR_MESSAGE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "success": False,
            "error": "Invalid request",
            "details": _validation_details(exc.detail),
        }
    elif isinstance(exc, Http404) or response.status_code == status.HTTP_404_NOT_FOUND:
        response.data = {"success": False, "error": "Not found"}
    elif isinstance(exc, DjangoPermissionDenied):
        response.data = {"success": False, "error": "Forbidden"}
    else:
        detail = getattr(exc, "detail", None)
        response.data = {"success": False, "error": str(detail) if detail else GENERIC_ERROR_MESSAGE}
    return response

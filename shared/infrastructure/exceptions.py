"""
API exception handling.

Wraps DRF's default handler so that domain errors and Django-level
validation errors reach the client as 400 responses instead of 500s.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.base import DomainError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DomainError):
        return Response({"non_field_errors": [exc.message]}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            data = exc.message_dict
        else:
            data = {"non_field_errors": exc.messages}
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, ProtectedError):
        return Response(
            {"detail": "Object is referenced by other records and cannot be deleted."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    view = context.get("view")
    logger.error(
        "Unhandled API error in %s: %s",
        view.__class__.__name__ if view else "unknown view",
        exc,
        exc_info=exc,
    )
    return None

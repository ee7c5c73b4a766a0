"""
Custom exceptions for the order lifecycle and settlement engine.

All engine errors subclass ValueError so existing ``except ValueError``
handlers in views keep turning business-rule rejections into HTTP 400.
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class EngineError(ValueError):
    """Base exception for engine rule violations."""
    http_status = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(EngineError):
    """Raised when a requested state change is not allowed from the current state."""

    def __init__(self, entity, current, requested=None, message=None):
        self.entity = entity
        self.current = current
        self.requested = requested
        if message is None:
            if requested is not None:
                message = f"Cannot transition {entity} from {current} to {requested}"
            else:
                message = f"{entity} is {current}; this action is not allowed"
        super().__init__(message)


class InsufficientInputError(EngineError):
    """Raised when required input is missing or below the required amount."""


class ConfirmationRequiredError(EngineError):
    """Raised when a bulk action is attempted without explicit confirmation."""

    def __init__(self, action, message=None):
        self.action = action
        if message is None:
            message = f"'{action}' requires explicit confirmation"
        super().__init__(message)


class ConcurrentModificationError(EngineError):
    """Raised when a record changed since the caller last read it."""
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, entity, expected_version=None, actual_version=None, message=None):
        self.entity = entity
        self.expected_version = expected_version
        self.actual_version = actual_version
        if message is None:
            message = (
                f"{entity} was modified by another terminal "
                f"(expected version {expected_version}, found {actual_version}). Reload and retry."
            )
        super().__init__(message)


class SettlementError(EngineError):
    """Raised when a rider settlement cannot be applied."""


class DrawerSessionError(EngineError):
    """Raised when a cash drawer session operation is not allowed."""


class SeatingError(EngineError):
    """Raised when a party cannot be seated at a table."""


class DispatchError(EngineError):
    """Raised when an order cannot be dispatched to a rider."""


def error_response(exc):
    """Build the ``{"error": ...}`` response used across engine views."""
    http_status = getattr(exc, 'http_status', status.HTTP_400_BAD_REQUEST)
    return Response({"error": str(exc)}, status=http_status)


def engine_exception_handler(exc, context):
    """
    DRF exception handler that maps engine errors onto HTTP responses.

    Falls back to DRF's default handler for everything else.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, ValueError):
        logger.warning(f"Rejected request: {exc}")
        return error_response(exc)

    if isinstance(exc, ObjectDoesNotExist):
        return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity conflict: {exc}")
        return Response(
            {"error": "The record was changed by another terminal. Reload and retry."},
            status=status.HTTP_409_CONFLICT,
        )

    return None

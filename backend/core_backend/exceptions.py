"""
Error model for the order / add-on / inventory engine.

Every failure the engine reports to a caller is an EngineError subclass
carrying a stable machine-readable code, a human message, an HTTP status and
an optional details dict. The REST framework exception handler below turns
them into tagged error results:

    {"success": false, "error": {"code": ..., "message": ..., "details": {...}}}

Insufficient stock is deliberately NOT an error here; see
core_backend.results.InsufficientStockWarning.
"""
import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class EngineError(Exception):
    """Base class for errors raised by engine services."""

    default_code = "ENGINE_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message, code=None, details=None):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.timestamp = timezone.now()
        super().__init__(self.message)

    def to_dict(self):
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationFailed(EngineError):
    """Input rejected before any state was touched."""

    default_code = "VALIDATION_FAILED"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(EngineError):
    """A referenced entity is missing or inactive."""

    default_code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(EngineError):
    """The request conflicts with the current state (duplicate, terminal order)."""

    default_code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT


class InvalidTransition(Conflict):
    """An order status change that the lifecycle does not allow."""

    default_code = "INVALID_TRANSITION"


class TransactionFailed(EngineError):
    """The unit of work could not be committed; nothing was persisted."""

    default_code = "TRANSACTION_FAILED"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InventoryRestoreFailed(TransactionFailed):
    """Stock could not be returned while cancelling; the cancellation was rolled back."""

    default_code = "INVENTORY_RESTORE_FAILED"


def error_payload(exc):
    return {"success": False, "error": exc.to_dict()}


def engine_exception_handler(exc, context):
    """
    REST framework exception handler.

    EngineErrors become tagged error results. Everything else goes through
    the framework's default handler and is wrapped in the same envelope so
    clients only ever parse one error shape.
    """
    if isinstance(exc, EngineError):
        request = context.get("request")
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"{exc.code} on {getattr(request, 'method', '?')} "
            f"{getattr(request, 'path', '?')}: {exc.message}"
        )
        return Response(error_payload(exc), status=exc.status_code)

    response = exception_handler(exc, context)

    if response is not None:
        code = "VALIDATION_FAILED" if response.status_code == status.HTTP_400_BAD_REQUEST else "REQUEST_FAILED"
        if response.status_code == status.HTTP_404_NOT_FOUND:
            code = "NOT_FOUND"
        details = response.data if isinstance(response.data, dict) else {"errors": response.data}
        message = details.get("detail", "Request could not be processed")
        response.data = {
            "success": False,
            "error": {
                "code": code,
                "message": str(message),
                "details": details,
            },
        }

    return response

"""API error rendering: every failure becomes ``{"error": ..., "details"?: ...}``."""
import logging

from django.db.models.deletion import ProtectedError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from core.exceptions import ServiceError

logger = logging.getLogger("crm")


def _first_message(data):
    """Flatten DRF's nested error structure down to one readable sentence."""
    if isinstance(data, dict):
        for key, value in data.items():
            message = _first_message(value)
            if message is None:
                continue
            if key in ("detail", "non_field_errors"):
                return message
            return f"{key}: {message}"
        return None
    if isinstance(data, (list, tuple)):
        for item in data:
            message = _first_message(item)
            if message is not None:
                return message
        return None
    return str(data)


def _error_response(message, status_code, details=None, headers=None):
    body = {"error": message}
    if details:
        body["details"] = details
    return Response(body, status=status_code, headers=headers)


def api_exception_handler(exc, context):
    """DRF ``EXCEPTION_HANDLER`` mapping service, framework and unexpected errors."""
    view = context.get("view")

    if isinstance(exc, ServiceError):
        set_rollback()
        return _error_response(exc.message, exc.status_code, exc.details)

    if isinstance(exc, ProtectedError):
        set_rollback()
        return _error_response(
            "This record is still referenced and cannot be deleted.",
            status.HTTP_409_CONFLICT,
            {"protected_objects": len(exc.protected_objects)},
        )

    if isinstance(exc, (Http404, exceptions.NotFound)):
        message = getattr(view, "not_found_message", None)
        if message:
            set_rollback()
            return _error_response(message, status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is None:
        logger.error(
            "Unhandled error in %s",
            view.__class__.__name__ if view is not None else "API",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        set_rollback()
        return _error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = response.data
    if isinstance(exc, exceptions.ValidationError):
        response.data = {
            "error": _first_message(data) or "Invalid input.",
            "details": data,
        }
    elif isinstance(data, dict) and set(data) <= {"detail", "code", "messages"}:
        response.data = {"error": str(data.get("detail", ""))}
    else:
        response.data = {"error": _first_message(data) or "Request failed.", "details": data}
    return response

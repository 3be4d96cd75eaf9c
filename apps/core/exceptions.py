import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AuthenticationRequired(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"
    default_code = "not_authenticated"


class AuthorizationDenied(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action"
    default_code = "permission_denied"


class ValidationFailed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"
    default_code = "invalid"


class ResourceNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"
    default_code = "not_found"


class ResourceStateConflict(APIException):
    """
    The resource exists but is not in a state that allows the operation
    (e.g. a listing that is not ACTIVE, a job that is already assigned)
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Resource is not in a valid state for this operation"
    default_code = "invalid_state"


def _first_message(detail) -> str:
    """Flatten DRF error detail (str, list or dict) to its first message"""
    if isinstance(detail, dict):
        if not detail:
            return ""
        return _first_message(next(iter(detail.values())))
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """
    Render every error as {"success": false, "error": "..."}

    Unhandled exceptions become a 500 with the view's generic failure message;
    the raw error is logged, never returned.
    """
    response = exception_handler(exc, context)

    if response is not None:
        detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
        response.data = {"success": False, "error": _first_message(detail)}
        return response

    view = context.get("view")
    action = getattr(view, "action", None)
    failure_messages = getattr(view, "failure_messages", {})
    message = failure_messages.get(action, "Internal server error")

    logger.error(f"Unhandled error in {view.__class__.__name__}.{action}: {exc}", exc_info=exc)

    return Response({"success": False, "error": message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import InsufficientStockError

logger = logging.getLogger(__name__)


def exception_handler(exc, context):
    """
    DRF EXCEPTION_HANDLER. Every failure leaves as
    {"success": false, "message": ...}; field errors from serializers go
    under "errors" and stock rejections carry "available".
    """
    response = drf_exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "request")
        return Response({"success": False, "message": "Internal server error."},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    payload = {"success": False}
    if isinstance(response.data, dict) and set(response.data) == {"detail"}:
        payload["message"] = response.data["detail"]
    else:
        payload["message"] = "Invalid request."
        payload["errors"] = response.data
    if isinstance(exc, InsufficientStockError):
        payload["available"] = exc.available
    response.data = payload
    return response

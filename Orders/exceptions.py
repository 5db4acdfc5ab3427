"""
Failure kinds raised by the order coordinator.

They subclass DRF's APIException so views can let them propagate and the
framework picks the status code; ``Orders.handlers.exception_handler``
shapes the response body.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class OrderServiceError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Order request failed."
    default_code = "order_error"
    retryable = False


class ValidationError(OrderServiceError):
    """Malformed or missing input. Raised before anything is written."""
    default_detail = "Invalid order request."
    default_code = "invalid"


class NotFoundError(OrderServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class InsufficientStockError(OrderServiceError):
    default_code = "insufficient_stock"

    def __init__(self, available, requested=None):
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient stock: {available} available.")


class TransactionFailure(OrderServiceError):
    """The atomic unit could not commit; nothing was written, safe to retry."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The order could not be processed, please retry."
    default_code = "transaction_failure"
    retryable = True

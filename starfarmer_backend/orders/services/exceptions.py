# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for the order lifecycle.
"""


class OrderServiceError(Exception):
    """Base exception for all order service failures."""


class OrderValidationError(OrderServiceError):
    """Raised when checkout input violates an order invariant."""


class OrderNotFoundError(OrderServiceError):
    """Raised when an order cannot be resolved (or is not visible to the caller)."""


class OrderPermissionError(OrderServiceError):
    """Raised when the caller may not perform the operation."""


class InvalidOrderStatusError(OrderValidationError):
    """Raised when a status value is not one of the enumerated fulfilment statuses."""


class OrderPersistenceError(OrderServiceError):
    """Raised when the order could not be written."""


class PaymentInitiationError(OrderServiceError):
    """
    Raised when the gateway could not start a payment for a persisted order.

    timed_out=True means the outcome is unknown and the order stays pending.
    """

    def __init__(self, message: str, *, order, timed_out: bool = False, http_status=None):
        super().__init__(message)
        self.message = message
        self.order = order
        self.timed_out = timed_out
        self.http_status = http_status

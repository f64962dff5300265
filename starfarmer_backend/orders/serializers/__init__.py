from .checkout import CheckoutInputSerializer, ShippingAddressSerializer
from .order import (
    InitiatePaymentResponseSerializer,
    OrderItemSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    TransactionStatusSerializer,
)

__all__ = [
    "CheckoutInputSerializer",
    "ShippingAddressSerializer",
    "OrderItemSerializer",
    "OrderSerializer",
    "OrderStatusUpdateSerializer",
    "InitiatePaymentResponseSerializer",
    "TransactionStatusSerializer",
]

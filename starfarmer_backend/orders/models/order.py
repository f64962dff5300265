# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Order(models.Model):
    """
    A customer purchase and its payment state.

    GUARANTEES:
    - Items, address, payment method/gateway, charges, total and the merchant
      transaction id are immutable once the order exists.
    - Payment state (payment_status, gateway_transaction_id) is NEVER written
      through save(); it changes only via OrderService's conditional
      queryset updates (pending -> paid/failed).
    - Orders are never deleted; history lives in the status field.

    Construct new orders with orders.services.order_factory, not directly.
    """

    # Fulfilment / lifecycle
    STATUS_PAYMENT_PENDING = "payment_pending"
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_PAYMENT_FAILED = "payment_failed"
    STATUS_PAYMENT_ISSUE = "payment_issue"

    STATUS_CHOICES = [
        (STATUS_PAYMENT_PENDING, "Payment pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_PAYMENT_FAILED, "Payment failed"),
        (STATUS_PAYMENT_ISSUE, "Payment issue"),
    ]

    # Payment
    PAYMENT_NOT_APPLICABLE = "not_applicable"
    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_NOT_APPLICABLE, "Not applicable"),
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
    ]

    METHOD_COD = "cod"
    METHOD_ONLINE = "online"

    PAYMENT_METHOD_CHOICES = [
        (METHOD_COD, "Cash on delivery"),
        (METHOD_ONLINE, "Online"),
    ]

    GATEWAY_NONE = "none"
    GATEWAY_PHONEPE = "phonepe"

    PAYMENT_GATEWAY_CHOICES = [
        (GATEWAY_NONE, "None"),
        (GATEWAY_PHONEPE, "PhonePe"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    shipping_address = models.JSONField(
        help_text="name, phone, address_line1, address_line2, city, state, postal_code",
    )

    payment_method = models.CharField(max_length=16, choices=PAYMENT_METHOD_CHOICES)
    payment_gateway = models.CharField(
        max_length=16,
        choices=PAYMENT_GATEWAY_CHOICES,
        default=GATEWAY_NONE,
    )

    shipping_charge = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total = models.DecimalField(max_digits=12, decimal_places=2)

    merchant_transaction_id = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Correlation key for gateway callbacks (online orders only)",
    )
    gateway_transaction_id = models.CharField(max_length=128, blank=True, default="")

    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        db_index=True,
    )
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="orders_created_at_idx"),
            models.Index(fields=["user", "created_at"], name="orders_user_created_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "user_id",
        "shipping_address",
        "payment_method",
        "payment_gateway",
        "shipping_charge",
        "total",
        "merchant_transaction_id",
        "created_at",
    )

    # Written only by OrderService conditional updates
    _PAYMENT_FIELDS = (
        "payment_status",
        "gateway_transaction_id",
    )

    def _validate_payment_shape(self):
        if self.payment_method == self.METHOD_COD:
            if self.payment_status != self.PAYMENT_NOT_APPLICABLE:
                raise ValueError("Cash orders must have payment_status=not_applicable")
            if self.payment_gateway != self.GATEWAY_NONE:
                raise ValueError("Cash orders cannot use a payment gateway")
            if self.merchant_transaction_id:
                raise ValueError("Cash orders cannot carry a merchant transaction id")
        elif self.payment_method == self.METHOD_ONLINE:
            if self.payment_status != self.PAYMENT_PENDING:
                raise ValueError("Online orders must start with payment_status=pending")
            if self.payment_gateway != self.GATEWAY_PHONEPE:
                raise ValueError("Online orders must use the PhonePe gateway")
            if not self.merchant_transaction_id:
                raise ValueError("Online orders require a merchant transaction id")
        else:
            raise ValueError(f"Unknown payment_method '{self.payment_method}'")

    def _validate_immutable(self, previous: "Order", update_fields=None):
        written = None
        if update_fields is not None:
            written = {"user_id" if f == "user" else f for f in update_fields}

        for name in self._IMMUTABLE_FIELDS:
            if written is not None and name not in written:
                continue
            if getattr(self, name) != getattr(previous, name):
                raise ValueError(f"Order field '{name}' cannot be changed.")

        for name in self._PAYMENT_FIELDS:
            if written is not None and name not in written:
                continue
            if getattr(self, name) != getattr(previous, name):
                raise ValueError(
                    f"Order field '{name}' is payment state and cannot be saved directly."
                )

    def save(self, *args, **kwargs):
        if self._state.adding:
            self._validate_payment_shape()
        else:
            previous = Order.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous, kwargs.get("update_fields"))

        super().save(*args, **kwargs)

    def __str__(self):
        return f"Order {self.id} | {self.total} | {self.status}/{self.payment_status}"

# orders/models/order_item.py

"""
ORDER ITEM (IMMUTABLE SNAPSHOT)

- unit_price is the product's selling price at order time, never a live reference.
- product_name keeps the English name for receipts/emails even if the product
  is renamed later.
- Rows are append-only: once saved they cannot be edited.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

from .order import Order


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    product_name = models.CharField(max_length=255, blank=True, default="")

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    total_price = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def clean(self):
        if self.quantity is None or int(self.quantity) < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1"})

        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError({"unit_price": "Unit price cannot be negative"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("OrderItem is an immutable snapshot and cannot be edited.")

        self.full_clean(exclude=["order", "total_price"])
        self.total_price = Decimal(self.unit_price) * Decimal(int(self.quantity))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name or self.product_id} x {self.quantity}"

"""
PATH: cart/models/cart.py

CART MODEL

Purpose:
- A customer's saved shopping cart (one per user).
- Survives logout: the storefront syncs its local cart here.

Rules:
- Exactly one cart per user (OneToOne).
- Subtotal is derived from CURRENT product selling prices; nothing is snapshotted
  until an order is placed.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    @classmethod
    def for_user(cls, user) -> "Cart":
        cart, _ = cls.objects.get_or_create(user=user)
        return cart

    @property
    def item_count(self) -> int:
        return sum(int(item.quantity) for item in self.items.all())

    @property
    def subtotal_amount(self) -> Decimal:
        subtotal = Decimal("0.00")
        for item in self.items.select_related("product"):
            subtotal += item.line_total
        return subtotal

    def __str__(self):
        return f"Cart {self.id} | {self.user}"

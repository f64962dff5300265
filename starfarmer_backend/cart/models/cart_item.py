# cart/models/cart_item.py

"""
CART ITEM MODEL

Rules:
- One line per product per cart (DB constraint).
- Quantity must be > 0 (a zero/negative update removes the line at the API layer).
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product
from .cart import Cart


class CartItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="cart_items",
    )

    quantity = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"],
                name="unique_product_per_shopping_cart",
            )
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError({"quantity": "Quantity must be greater than zero"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def unit_price(self) -> Decimal:
        return self.product.selling_price

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * Decimal(int(self.quantity or 0))

    def __str__(self):
        return f"{getattr(self.product, 'name_en', 'Product')} x {self.quantity}"

# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


CATEGORY_FERTILIZERS = "fertilizers"
CATEGORY_SEEDS = "seeds"
CATEGORY_EQUIPMENT = "equipment"

CATEGORY_CHOICES = [
    (CATEGORY_FERTILIZERS, "Fertilizers"),
    (CATEGORY_SEEDS, "Seeds"),
    (CATEGORY_EQUIPMENT, "Equipment"),
]


class Product(models.Model):
    """
    Represents a sellable catalogue product.

    LANGUAGE MODEL:
    - Every customer-facing text exists in English (en) and Marathi (mr).
    - benefits is a non-empty list of {"en": ..., "mr": ...} objects.

    PRICING:
    - price is the list price.
    - discounted_price is what the customer actually pays.
    - Order lines snapshot discounted_price at order time (see orders.OrderItem).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)

    name_en = models.CharField(max_length=255, db_index=True)
    name_mr = models.CharField(max_length=255)

    description_en = models.TextField()
    description_mr = models.TextField()

    benefits = models.JSONField(default=list)

    price = models.DecimalField(max_digits=10, decimal_places=2)
    discounted_price = models.DecimalField(max_digits=10, decimal_places=2)

    category = models.CharField(
        max_length=20,
        choices=CATEGORY_CHOICES,
        db_index=True,
    )

    image = models.URLField(max_length=500)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sku"], name="products_pr_sku_idx"),
            models.Index(fields=["name_en"], name="products_pr_name_en_idx"),
            models.Index(fields=["category"], name="products_pr_categor_idx"),
        ]

    def __str__(self):
        return f"{self.name_en} ({self.sku})"

    @property
    def selling_price(self) -> Decimal:
        return self.discounted_price

    def clean(self):
        if self.price is None or Decimal(self.price) <= 0:
            raise ValidationError("price must be greater than zero")

        if self.discounted_price is None or Decimal(self.discounted_price) <= 0:
            raise ValidationError("discounted_price must be greater than zero")

        if Decimal(self.discounted_price) > Decimal(self.price):
            raise ValidationError("discounted_price cannot exceed price")

        validate_benefits(self.benefits)


def validate_benefits(value):
    """
    benefits must be a non-empty list of objects carrying both languages.
    """
    if not isinstance(value, list) or not value:
        raise ValidationError("Benefits cannot be empty")

    for entry in value:
        if not isinstance(entry, dict):
            raise ValidationError("Each benefit must be an object with en and mr")
        for lang in ("en", "mr"):
            text = entry.get(lang)
            if not isinstance(text, str) or not text.strip():
                raise ValidationError(f"Each benefit must have a non-empty '{lang}' text")

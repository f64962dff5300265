# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Canonical Product serializer for both admin management and public browsing.
- Bilingual fields are flat (name_en / name_mr); benefits stay a list of {en, mr}.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from products.models import Product
from products.models.product import validate_benefits


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - price and discounted_price are both > 0
    - discounted_price <= price (also enforced on partial updates)
    - benefits is non-empty and bilingual
    """

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name_en",
            "name_mr",
            "description_en",
            "description_mr",
            "benefits",
            "price",
            "discounted_price",
            "category",
            "image",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_sku(self, value: str):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("sku cannot be blank")
        return v

    def validate_price(self, value):
        if value is None or Decimal(value) <= 0:
            raise serializers.ValidationError("price must be greater than zero")
        return value

    def validate_discounted_price(self, value):
        if value is None or Decimal(value) <= 0:
            raise serializers.ValidationError("discounted_price must be greater than zero")
        return value

    def validate_benefits(self, value):
        try:
            validate_benefits(value)
        except DjangoValidationError as exc:
            raise serializers.ValidationError(exc.messages)
        return value

    def validate(self, attrs):
        attrs = super().validate(attrs)

        price = attrs.get("price", getattr(self.instance, "price", None))
        discounted = attrs.get(
            "discounted_price", getattr(self.instance, "discounted_price", None)
        )
        if price is not None and discounted is not None and discounted > price:
            raise serializers.ValidationError(
                {"discounted_price": "discounted_price cannot exceed price"}
            )
        return attrs

"""
PATH: cart/serializers/cart_item.py

Cart line items for the storefront: product identity + current pricing.
"""

from rest_framework import serializers

from cart.models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    name_en = serializers.CharField(source="product.name_en", read_only=True)
    name_mr = serializers.CharField(source="product.name_mr", read_only=True)
    image = serializers.CharField(source="product.image", read_only=True)
    is_available = serializers.BooleanField(source="product.is_active", read_only=True)

    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "name_en",
            "name_mr",
            "image",
            "is_available",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields

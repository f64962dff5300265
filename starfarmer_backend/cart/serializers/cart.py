# cart/serializers/cart.py

"""
CART SERIALIZER

Guarantees:
- items are read-only
- totals are computed server-side (never trusted from client)
"""

from rest_framework import serializers

from cart.models import Cart
from .cart_item import CartItemSerializer


class CartSerializer(serializers.ModelSerializer):
    items = serializers.SerializerMethodField(read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    subtotal_amount = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Cart
        fields = [
            "id",
            "items",
            "item_count",
            "subtotal_amount",
            "updated_at",
        ]
        read_only_fields = fields

    def get_items(self, obj):
        items = obj.items.select_related("product")
        return CartItemSerializer(items, many=True).data

    def get_subtotal_amount(self, obj) -> str:
        # String avoids float serialization
        return f"{obj.subtotal_amount:.2f}"

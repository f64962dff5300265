# orders/serializers/checkout.py

"""
CHECKOUT INPUT SERIALIZERS

Shape validation only. Money invariants (price snapshot, total check) are
enforced by orders.services.order_factory.
"""

from decimal import Decimal

from rest_framework import serializers


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=20)
    address_line1 = serializers.CharField(max_length=255)
    address_line2 = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=12)


class CheckoutLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CheckoutInputSerializer(serializers.Serializer):
    items = CheckoutLineSerializer(many=True, allow_empty=False)
    shipping_address = ShippingAddressSerializer()
    shipping_charge = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
        default=Decimal("0.00"),
    )
    total = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )

# orders/serializers/order.py

"""
ORDER READ SERIALIZERS

All payment fields are read-only; payment state is owned by OrderService.
"""

from rest_framework import serializers

from orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    name_en = serializers.CharField(source="product.name_en", read_only=True)
    name_mr = serializers.CharField(source="product.name_mr", read_only=True)
    image = serializers.CharField(source="product.image", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "name_en",
            "name_mr",
            "image",
            "quantity",
            "unit_price",
            "total_price",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_email",
            "items",
            "shipping_address",
            "payment_method",
            "payment_gateway",
            "shipping_charge",
            "total",
            "merchant_transaction_id",
            "gateway_transaction_id",
            "payment_status",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    # Enumerated values are enforced by the lifecycle rules, not here, so an
    # unknown value is reported with the allowed list.
    status = serializers.CharField()


class InitiatePaymentResponseSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    merchant_transaction_id = serializers.CharField()
    redirect_url = serializers.URLField()


class TransactionStatusSerializer(serializers.Serializer):
    order_id = serializers.UUIDField(source="id")
    payment_status = serializers.CharField()
    status = serializers.CharField()

# cart/views/api.py

"""
CART API VIEWS

Purpose:
- Per-user saved cart (get / add / update / remove / clear / sync)

Hard rules:
- Money is server-owned: line prices come from Product.selling_price.
- Only active products can be added or synced.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status
from rest_framework.response import Response
from rest_framework.views import APIView

from cart.models import Cart, CartItem
from cart.serializers import CartSerializer
from products.models import Product
from users.permissions import IsCustomerOrAdmin

logger = logging.getLogger(__name__)


# =====================================================
# SWAGGER INPUT SERIALIZERS
# =====================================================

class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)


class UpdateCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    # <= 0 removes the line
    quantity = serializers.IntegerField()


class RemoveCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


class SyncCartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class SyncCartInputSerializer(serializers.Serializer):
    items = SyncCartLineSerializer(many=True, allow_empty=True)


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def _cart_response(cart: Cart, *, message: str = ""):
    data = CartSerializer(cart).data
    if message:
        data = {"message": message, **data}
    return Response(data, status=status.HTTP_200_OK)


# =====================================================
# CART API VIEWS
# =====================================================

class CartView(APIView):
    permission_classes = [IsCustomerOrAdmin]

    @extend_schema(
        responses={200: CartSerializer},
        description="Get (or lazily create) the authenticated user's cart",
        tags=["Cart"],
    )
    def get(self, request):
        return _cart_response(Cart.for_user(request.user))


class AddCartItemView(APIView):
    """
    Add a product to the cart; increments quantity if the product is already in it.
    """

    permission_classes = [IsCustomerOrAdmin]

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: CartSerializer},
        tags=["Cart"],
    )
    @transaction.atomic
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = get_object_or_404(
            Product, id=serializer.validated_data["product_id"], is_active=True
        )
        quantity = int(serializer.validated_data["quantity"])

        cart = Cart.for_user(request.user)
        item, created = CartItem.objects.select_for_update().get_or_create(
            cart=cart,
            product=product,
            defaults={"quantity": quantity},
        )
        if not created:
            item.quantity = int(item.quantity) + quantity
            item.save(update_fields=["quantity", "updated_at"])

        return _cart_response(cart, message="Item added to cart")


class UpdateCartItemView(APIView):
    permission_classes = [IsCustomerOrAdmin]

    @extend_schema(
        request=UpdateCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Set the quantity of a cart line (quantity <= 0 removes it)",
        tags=["Cart"],
    )
    @transaction.atomic
    def patch(self, request):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product_id = serializer.validated_data["product_id"]
        quantity = int(serializer.validated_data["quantity"])
        cart = Cart.for_user(request.user)

        if quantity <= 0:
            cart.items.filter(product_id=product_id).delete()
            return _cart_response(cart, message="Item removed from cart")

        item = cart.items.filter(product_id=product_id).first()
        if item is None:
            return error_response(
                code="ITEM_NOT_IN_CART",
                message="Item is not in the cart.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        item.quantity = quantity
        item.save(update_fields=["quantity", "updated_at"])
        return _cart_response(cart, message="Cart updated")


class RemoveCartItemView(APIView):
    permission_classes = [IsCustomerOrAdmin]

    @extend_schema(
        request=RemoveCartItemInputSerializer,
        responses={200: CartSerializer},
        tags=["Cart"],
    )
    @transaction.atomic
    def delete(self, request):
        serializer = RemoveCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = Cart.for_user(request.user)
        cart.items.filter(product_id=serializer.validated_data["product_id"]).delete()
        return _cart_response(cart, message="Item removed")


class ClearCartView(APIView):
    permission_classes = [IsCustomerOrAdmin]

    @extend_schema(responses={200: CartSerializer}, tags=["Cart"])
    @transaction.atomic
    def delete(self, request):
        cart = Cart.for_user(request.user)
        cart.items.all().delete()
        return _cart_response(cart, message="Cart cleared")


class SyncCartView(APIView):
    """
    Replace the whole cart with the client's local cart (login / logout sync).

    Duplicate product lines in the payload are merged by summing quantities.
    """

    permission_classes = [IsCustomerOrAdmin]

    @extend_schema(
        request=SyncCartInputSerializer,
        responses={200: CartSerializer},
        tags=["Cart"],
    )
    @transaction.atomic
    def post(self, request):
        serializer = SyncCartInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        quantities = {}
        for line in serializer.validated_data["items"]:
            pid = line["product_id"]
            quantities[pid] = quantities.get(pid, 0) + int(line["quantity"])

        products = {
            p.id: p
            for p in Product.objects.filter(id__in=list(quantities.keys()), is_active=True)
        }
        missing = [str(pid) for pid in quantities if pid not in products]
        if missing:
            return error_response(
                code="PRODUCT_NOT_FOUND",
                message=f"Unknown or inactive products: {', '.join(missing)}",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        cart = Cart.for_user(request.user)
        cart.items.all().delete()
        for pid, qty in quantities.items():
            CartItem.objects.create(cart=cart, product=products[pid], quantity=qty)

        logger.info(
            "Cart synced",
            extra={"user_id": str(request.user.id), "lines": len(quantities)},
        )
        return _cart_response(cart, message="Cart synced")

# orders/views/order.py

"""
ORDER API VIEWS

Customer:
- POST /api/orders/                                  cash-on-delivery checkout
- POST /api/orders/initiate-payment/                 online checkout (PhonePe redirect)
- GET  /api/orders/my-orders/
- GET  /api/orders/status-by-transaction/<mtid>/     poll after PhonePe redirect
- GET  /api/orders/<id>/                             owner or admin

Admin:
- GET   /api/orders/
- PATCH /api/orders/<id>/status/

Views stay thin: OrderService owns every state change.
"""

from __future__ import annotations

import logging

from django.db.models import Prefetch
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from orders.models import Order, OrderItem
from orders.serializers import (
    CheckoutInputSerializer,
    InitiatePaymentResponseSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    TransactionStatusSerializer,
)
from orders.services.exceptions import (
    OrderNotFoundError,
    OrderPermissionError,
    OrderPersistenceError,
    OrderValidationError,
    PaymentInitiationError,
)
from orders.services.order_service import build_order_service
from payments.services.exceptions import GatewayConfigError
from users.permissions import IsAdmin, IsCustomerOrAdmin

logger = logging.getLogger(__name__)


class CheckoutThrottle(UserRateThrottle):
    """
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['public_write'].
    """

    scope = "public_write"


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

def error_response(*, code: str, message: str, http_status: int, **extra):
    body = {"error": {"code": code, "message": message}}
    body.update(extra)
    return Response(body, status=http_status)


def _service_error_response(exc: Exception):
    if isinstance(exc, OrderValidationError):
        return error_response(
            code="VALIDATION_ERROR", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST
        )
    if isinstance(exc, OrderNotFoundError):
        return error_response(
            code="NOT_FOUND", message=str(exc), http_status=status.HTTP_404_NOT_FOUND
        )
    if isinstance(exc, OrderPermissionError):
        return error_response(
            code="FORBIDDEN", message=str(exc), http_status=status.HTTP_403_FORBIDDEN
        )
    if isinstance(exc, GatewayConfigError):
        return error_response(
            code="GATEWAY_NOT_CONFIGURED",
            message="Online payments are not available right now.",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if isinstance(exc, OrderPersistenceError):
        return error_response(
            code="INTERNAL_ERROR",
            message=str(exc),
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    raise exc


def _orders_queryset():
    return Order.objects.select_related("user").prefetch_related(
        Prefetch("items", queryset=OrderItem.objects.select_related("product"))
    )


# =====================================================
# CHECKOUT
# =====================================================

class OrderListCreateView(generics.GenericAPIView):
    serializer_class = OrderSerializer
    parser_classes = [JSONParser]

    def get_permissions(self):
        if self.request.method == "GET":
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated(), IsCustomerOrAdmin()]

    def get_throttles(self):
        if self.request.method == "POST":
            return [CheckoutThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        return _orders_queryset()

    @extend_schema(
        responses={200: OrderSerializer(many=True)},
        description="All orders (admin only), newest first.",
        tags=["Orders"],
    )
    def get(self, request):
        qs = self.get_queryset()

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page = self.paginate_queryset(qs)
        data = OrderSerializer(page, many=True).data
        return self.get_paginated_response(data)

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="Validation error"),
        },
        description="Place a cash-on-delivery order.",
        tags=["Orders"],
    )
    def post(self, request):
        s = CheckoutInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = build_order_service().create_cash_order(
                user=request.user,
                items=data["items"],
                shipping_address=data["shipping_address"],
                shipping_charge=data["shipping_charge"],
                total=data["total"],
            )
        except (OrderValidationError, OrderPersistenceError) as exc:
            return _service_error_response(exc)

        order = _orders_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class InitiatePaymentView(APIView):
    permission_classes = [IsAuthenticated, IsCustomerOrAdmin]
    parser_classes = [JSONParser]
    throttle_classes = [CheckoutThrottle]

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={
            200: InitiatePaymentResponseSerializer,
            400: OpenApiResponse(description="Validation error"),
            500: OpenApiResponse(description="Gateway not configured"),
            502: OpenApiResponse(description="Gateway rejected or unreachable"),
            504: OpenApiResponse(description="Gateway timed out; order stays pending"),
        },
        description="Create a pending online order and start a PhonePe PAY_PAGE transaction.",
        tags=["Orders"],
    )
    def post(self, request):
        s = CheckoutInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            start = build_order_service().initiate_online_payment(
                user=request.user,
                items=data["items"],
                shipping_address=data["shipping_address"],
                shipping_charge=data["shipping_charge"],
                total=data["total"],
            )
        except PaymentInitiationError as exc:
            order = exc.order
            if exc.timed_out:
                return error_response(
                    code="GATEWAY_TIMEOUT",
                    message="Payment gateway did not respond. Check the order status shortly.",
                    http_status=status.HTTP_504_GATEWAY_TIMEOUT,
                    order_id=str(order.id),
                    merchant_transaction_id=order.merchant_transaction_id,
                )
            return error_response(
                code="GATEWAY_ERROR",
                message=f"Payment initiation failed: {exc.message}",
                http_status=status.HTTP_502_BAD_GATEWAY,
                order_id=str(order.id),
            )
        except (OrderValidationError, OrderPersistenceError, GatewayConfigError) as exc:
            return _service_error_response(exc)

        return Response(
            {
                "order_id": start.order.id,
                "merchant_transaction_id": start.order.merchant_transaction_id,
                "redirect_url": start.redirect_url,
            },
            status=status.HTTP_200_OK,
        )


# =====================================================
# READ PATHS
# =====================================================

class MyOrdersView(generics.ListAPIView):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated, IsCustomerOrAdmin]

    @extend_schema(tags=["Orders"], description="Orders placed by the current user.")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return _orders_queryset().filter(user=self.request.user)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated, IsCustomerOrAdmin]

    @extend_schema(responses={200: OrderSerializer}, tags=["Orders"])
    def get(self, request, order_id):
        order = _orders_queryset().filter(pk=order_id).first()
        is_admin = getattr(request.user, "is_admin", False)
        if order is None or not (is_admin or order.user_id == request.user.pk):
            return error_response(
                code="NOT_FOUND",
                message="No order found with that ID",
                http_status=status.HTTP_404_NOT_FOUND,
            )
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class OrderStatusByTransactionView(APIView):
    permission_classes = [IsAuthenticated, IsCustomerOrAdmin]

    @extend_schema(
        responses={
            200: TransactionStatusSerializer,
            404: OpenApiResponse(description="Unknown transaction"),
        },
        description="Resolve an order from its merchant transaction id (post-redirect polling).",
        tags=["Orders"],
    )
    def get(self, request, merchant_transaction_id):
        try:
            order = build_order_service().status_by_transaction(
                merchant_transaction_id=merchant_transaction_id,
                user=request.user,
            )
        except OrderNotFoundError as exc:
            return _service_error_response(exc)

        return Response(TransactionStatusSerializer(order).data, status=status.HTTP_200_OK)


# =====================================================
# ADMIN
# =====================================================

class OrderStatusUpdateView(APIView):
    permission_classes = [IsAuthenticated, IsAdmin]
    parser_classes = [JSONParser]

    @extend_schema(
        request=OrderStatusUpdateSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Unknown status value"),
            404: OpenApiResponse(description="Order not found"),
        },
        tags=["Orders"],
    )
    def patch(self, request, order_id):
        s = OrderStatusUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            order = build_order_service().update_fulfillment_status(
                order_id=order_id,
                new_status=s.validated_data["status"],
                actor=request.user,
            )
        except (OrderValidationError, OrderNotFoundError, OrderPermissionError) as exc:
            return _service_error_response(exc)

        order = _orders_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

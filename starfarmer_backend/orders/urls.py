# orders/urls.py

from django.urls import path

from orders.views.order import (
    InitiatePaymentView,
    MyOrdersView,
    OrderDetailView,
    OrderListCreateView,
    OrderStatusByTransactionView,
    OrderStatusUpdateView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="list-create"),
    path("my-orders/", MyOrdersView.as_view(), name="my-orders"),
    path("initiate-payment/", InitiatePaymentView.as_view(), name="initiate-payment"),
    path(
        "status-by-transaction/<str:merchant_transaction_id>/",
        OrderStatusByTransactionView.as_view(),
        name="status-by-transaction",
    ),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="detail"),
    path("<uuid:order_id>/status/", OrderStatusUpdateView.as_view(), name="update-status"),
]

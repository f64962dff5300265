"""
PATH: cart/urls.py

CART URLS

    /api/cart/          GET
    /api/cart/add/      POST
    /api/cart/update/   PATCH
    /api/cart/remove/   DELETE
    /api/cart/clear/    DELETE
    /api/cart/sync/     POST
"""

from django.urls import path

from cart.views.api import (
    AddCartItemView,
    CartView,
    ClearCartView,
    RemoveCartItemView,
    SyncCartView,
    UpdateCartItemView,
)

app_name = "cart"

urlpatterns = [
    path("", CartView.as_view(), name="detail"),
    path("add/", AddCartItemView.as_view(), name="add"),
    path("update/", UpdateCartItemView.as_view(), name="update"),
    path("remove/", RemoveCartItemView.as_view(), name="remove"),
    path("clear/", ClearCartView.as_view(), name="clear"),
    path("sync/", SyncCartView.as_view(), name="sync"),
]

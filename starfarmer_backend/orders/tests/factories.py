# orders/tests/factories.py

"""
Shared test helpers for users and orders.
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model

from orders.services.order_factory import (
    OrderLine,
    new_cash_order,
    new_online_order,
    persist_new_order,
)
from payments.services.transaction_ids import generate_merchant_transaction_id
from users.models import ROLE_ADMIN

User = get_user_model()

ADDRESS = {
    "name": "Ramesh Patil",
    "phone": "+91 98765 43210",
    "address_line1": "Gat No. 112, Near Gram Panchayat",
    "address_line2": "",
    "city": "Nashik",
    "state": "Maharashtra",
    "postal_code": "422003",
}


def make_customer(email="farmer@example.com", **extra):
    return User.objects.create_user(email=email, password="testpass123", **extra)


def make_admin(email="owner@example.com"):
    return User.objects.create_user(email=email, password="testpass123", role=ROLE_ADMIN)


def make_online_order(*, user, product, quantity=1, shipping_charge=Decimal("0.00"), mtid=None):
    total = product.selling_price * quantity + shipping_charge
    order, items = new_online_order(
        user=user,
        lines=[OrderLine(product=product, quantity=quantity)],
        shipping_address=ADDRESS,
        shipping_charge=shipping_charge,
        total=total,
        merchant_transaction_id=mtid or generate_merchant_transaction_id(),
    )
    return persist_new_order(order, items)


def make_cash_order(*, user, product, quantity=1, shipping_charge=Decimal("0.00")):
    total = product.selling_price * quantity + shipping_charge
    order, items = new_cash_order(
        user=user,
        lines=[OrderLine(product=product, quantity=quantity)],
        shipping_address=ADDRESS,
        shipping_charge=shipping_charge,
        total=total,
    )
    return persist_new_order(order, items)

# orders/services/order_factory.py

"""
ORDER FACTORY

Builds fully-valid, UNSAVED Order + OrderItem values:

- new_cash_order():   payment_method=cod,    gateway=none,    not_applicable / processing
- new_online_order(): payment_method=online, gateway=phonepe, pending / payment_pending

Money rules:
- unit prices are snapshotted from Product.selling_price (server-owned)
- amounts must be non-negative with at most 2 decimal places
- total must equal sum(quantity * unit_price) + shipping_charge
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction

from orders.models import Order, OrderItem
from orders.services.exceptions import OrderValidationError

TWOPLACES = Decimal("0.01")

ADDRESS_REQUIRED_FIELDS = (
    "name",
    "phone",
    "address_line1",
    "city",
    "state",
    "postal_code",
)
ADDRESS_OPTIONAL_FIELDS = ("address_line2",)

_NON_DIGITS = re.compile(r"\D+")


@dataclass(frozen=True)
class OrderLine:
    product: object
    quantity: int


def _money(value, *, field: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise OrderValidationError(f"{field} must be a valid amount")

    if not amount.is_finite():
        raise OrderValidationError(f"{field} must be a valid amount")
    if amount < 0:
        raise OrderValidationError(f"{field} cannot be negative")
    if amount != amount.quantize(TWOPLACES):
        raise OrderValidationError(f"{field} cannot have more than 2 decimal places")
    return amount.quantize(TWOPLACES)


def normalize_shipping_address(raw) -> dict:
    if not isinstance(raw, dict):
        raise OrderValidationError("shipping_address is required")

    address = {}
    missing = []
    for name in ADDRESS_REQUIRED_FIELDS:
        value = str(raw.get(name) or "").strip()
        if not value:
            missing.append(name)
        address[name] = value

    if missing:
        raise OrderValidationError(
            f"shipping_address is missing: {', '.join(missing)}"
        )

    for name in ADDRESS_OPTIONAL_FIELDS:
        address[name] = str(raw.get(name) or "").strip()

    if len(_NON_DIGITS.sub("", address["phone"])) < 10:
        raise OrderValidationError("shipping_address.phone must contain at least 10 digits")

    return address


def _build_items(lines) -> tuple[list[OrderItem], Decimal]:
    if not lines:
        raise OrderValidationError("Order must contain at least one item")

    items = []
    subtotal = Decimal("0.00")

    for line in lines:
        qty = line.quantity
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise OrderValidationError("Item quantity must be a whole number >= 1")

        product = line.product
        if not getattr(product, "is_active", False):
            raise OrderValidationError(f"Product {getattr(product, 'id', '')} is not available")

        unit_price = Decimal(product.selling_price).quantize(TWOPLACES)
        items.append(
            OrderItem(
                product=product,
                product_name=product.name_en,
                quantity=qty,
                unit_price=unit_price,
            )
        )
        subtotal += unit_price * qty

    return items, subtotal


def _build_order(*, user, lines, shipping_address, shipping_charge, total, **payment_fields):
    if user is None or not getattr(user, "pk", None):
        raise OrderValidationError("Order must belong to a user")

    address = normalize_shipping_address(shipping_address)
    charge = _money(shipping_charge if shipping_charge is not None else "0", field="shipping_charge")
    claimed_total = _money(total, field="total")

    items, subtotal = _build_items(lines)
    expected_total = subtotal + charge

    if claimed_total <= 0:
        raise OrderValidationError("total must be greater than zero")

    if claimed_total != expected_total:
        raise OrderValidationError(
            f"total {claimed_total} does not match items + shipping ({expected_total})"
        )

    order = Order(
        user=user,
        shipping_address=address,
        shipping_charge=charge,
        total=claimed_total,
        **payment_fields,
    )
    return order, items


def new_cash_order(*, user, lines, shipping_address, shipping_charge, total):
    return _build_order(
        user=user,
        lines=lines,
        shipping_address=shipping_address,
        shipping_charge=shipping_charge,
        total=total,
        payment_method=Order.METHOD_COD,
        payment_gateway=Order.GATEWAY_NONE,
        payment_status=Order.PAYMENT_NOT_APPLICABLE,
        status=Order.STATUS_PROCESSING,
        merchant_transaction_id=None,
    )


def new_online_order(*, user, lines, shipping_address, shipping_charge, total, merchant_transaction_id):
    if not merchant_transaction_id:
        raise OrderValidationError("Online orders require a merchant transaction id")

    return _build_order(
        user=user,
        lines=lines,
        shipping_address=shipping_address,
        shipping_charge=shipping_charge,
        total=total,
        payment_method=Order.METHOD_ONLINE,
        payment_gateway=Order.GATEWAY_PHONEPE,
        payment_status=Order.PAYMENT_PENDING,
        status=Order.STATUS_PAYMENT_PENDING,
        merchant_transaction_id=merchant_transaction_id,
    )


@transaction.atomic
def persist_new_order(order: Order, items: list[OrderItem]) -> Order:
    order.save()
    for item in items:
        item.order = order
        item.save()
    return order

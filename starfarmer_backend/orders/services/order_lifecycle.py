"""
ORDER LIFECYCLE DOMAIN RULES

Defines the ONLY allowed payment transitions for Order entities and the
classification of a gateway callback into a target state.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from __future__ import annotations


from orders.models import Order
from orders.services.exceptions import InvalidOrderStatusError
from payments.services.phonepe import parse_minor_units, to_minor_units

# ============================================================
# STATE DEFINITIONS
# ============================================================

FULFILLMENT_STATUSES = frozenset(value for value, _ in Order.STATUS_CHOICES)

FINAL_PAYMENT_STATUSES = frozenset({Order.PAYMENT_PAID, Order.PAYMENT_FAILED})

ALLOWED_PAYMENT_TRANSITIONS = {
    Order.PAYMENT_PENDING: {Order.PAYMENT_PAID, Order.PAYMENT_FAILED},
}

# (payment_status, status) targets
PAID_MATCHED = (Order.PAYMENT_PAID, Order.STATUS_PROCESSING)
PAID_AMOUNT_MISMATCH = (Order.PAYMENT_PAID, Order.STATUS_PAYMENT_ISSUE)
PAYMENT_FAILED = (Order.PAYMENT_FAILED, Order.STATUS_PAYMENT_FAILED)


# ============================================================
# DOMAIN RULES
# ============================================================


def payment_sources(to_status: str) -> frozenset:
    """
    Payment statuses an order may leave to reach `to_status`. Guarded writes
    filter on this set, so an empty set means the write can never match.
    """
    return frozenset(
        source
        for source, targets in ALLOWED_PAYMENT_TRANSITIONS.items()
        if to_status in targets
    )


def is_payment_final(payment_status: str) -> bool:
    return payment_status in FINAL_PAYMENT_STATUSES


def amount_matches(*, paid_minor_units, order_total) -> bool:
    """
    Compared in whole paise. False when the gateway amount is missing,
    non-numeric or fractional: the money moved, but we cannot confirm how much.
    """
    if paid_minor_units is None:
        return False
    try:
        paid = parse_minor_units(paid_minor_units)
    except ValueError:
        return False
    return paid == to_minor_units(order_total)


def classify_callback(notification, *, order_total) -> tuple[str, str]:
    """
    Map a verified callback to (payment_status, status).

    success + matching amount  -> paid / processing
    success + other amount     -> paid / payment_issue
    anything else              -> failed / payment_failed
    """
    if not notification.is_payment_success:
        return PAYMENT_FAILED

    if amount_matches(paid_minor_units=notification.amount, order_total=order_total):
        return PAID_MATCHED
    return PAID_AMOUNT_MISMATCH


def validate_fulfillment_status(value) -> str:
    status = str(value or "").strip()
    if status not in FULFILLMENT_STATUSES:
        raise InvalidOrderStatusError(
            f"'{value}' is not a valid order status. "
            f"Allowed: {', '.join(sorted(FULFILLMENT_STATUSES))}"
        )
    return status

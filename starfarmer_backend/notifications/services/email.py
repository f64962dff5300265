# notifications/services/email.py

"""
ACCOUNT + ORDER EMAILS

Rendered from notifications/templates/notifications/*.html, sent with
send_mail (plain-text alternative derived with strip_tags).

These functions RAISE on delivery failure; retry/backoff/logging lives in the
dispatcher.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


def _order_context(order) -> dict:
    items = [
        {
            "name": item.product_name or getattr(item.product, "name_en", ""),
            "quantity": item.quantity,
            "unit_price": item.unit_price,
            "total_price": item.total_price,
        }
        for item in order.items.select_related("product")
    ]
    return {
        "order": order,
        "items": items,
        "customer_email": getattr(order.user, "email", ""),
        "shipping_address": order.shipping_address or {},
    }


def _send(*, subject: str, template: str, context: dict, recipients: list[str]) -> int:
    html_message = render_to_string(template, context)
    plain_message = strip_tags(html_message)
    return send_mail(
        subject,
        plain_message,
        None,  # DEFAULT_FROM_EMAIL
        recipients,
        html_message=html_message,
        fail_silently=False,
    )


def send_order_confirmation(email: str, order) -> int:
    if not email:
        raise ValueError(f"Order {order.id} has no customer email")

    sent = _send(
        subject="Order Confirmation - Star Farmer",
        template="notifications/order_confirmation.html",
        context=_order_context(order),
        recipients=[email],
    )
    logger.info("Order confirmation sent", extra={"order_id": str(order.id)})
    return sent


def send_order_notification_to_admin(order) -> int:
    admin_email = (getattr(settings, "ADMIN_EMAIL", "") or "").strip()
    if not admin_email:
        logger.warning(
            "ADMIN_EMAIL not set; skipping admin order notification",
            extra={"order_id": str(order.id)},
        )
        return 0

    sent = _send(
        subject="New Order Received - Star Farmer",
        template="notifications/order_admin_notification.html",
        context=_order_context(order),
        recipients=[admin_email],
    )
    logger.info("Admin order notification sent", extra={"order_id": str(order.id)})
    return sent


def send_verification_email(email: str, verification_url: str) -> int:
    return _send(
        subject="Email Verification - Star Farmer",
        template="notifications/verify_email.html",
        context={"verification_url": verification_url},
        recipients=[email],
    )


def send_password_reset_email(email: str, reset_url: str) -> int:
    return _send(
        subject="Password Reset - Star Farmer",
        template="notifications/password_reset.html",
        context={
            "reset_url": reset_url,
            "expires_minutes": getattr(settings, "PASSWORD_RESET_TIMEOUT", 1800) // 60,
        },
        recipients=[email],
    )

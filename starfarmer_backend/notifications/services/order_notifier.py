# notifications/services/order_notifier.py

"""
ORDER NOTIFIER

Called by OrderService when an order is confirmed (cash order placed, or
online payment captured). Emails are scheduled with transaction.on_commit so
nothing is sent for a write that rolls back, and each job reloads the order
from the database.
"""

from __future__ import annotations

import logging

from django.db import transaction

from notifications.services.dispatcher import get_dispatcher
from notifications.services.email import (
    send_order_confirmation,
    send_order_notification_to_admin,
)

logger = logging.getLogger(__name__)


def _load_order(order_id):
    from orders.models import Order

    return (
        Order.objects.select_related("user")
        .prefetch_related("items__product")
        .get(pk=order_id)
    )


def send_customer_confirmation(order_id) -> None:
    order = _load_order(order_id)
    send_order_confirmation(order.user.email, order)


def send_admin_notification(order_id) -> None:
    send_order_notification_to_admin(_load_order(order_id))


class OrderEmailNotifier:
    def __init__(self, dispatcher=None):
        self._dispatcher = dispatcher

    @property
    def dispatcher(self):
        return self._dispatcher or get_dispatcher()

    def order_confirmed(self, order_id) -> None:
        transaction.on_commit(lambda: self._dispatch(order_id))

    def _dispatch(self, order_id) -> None:
        logger.info("Queueing order emails", extra={"order_id": str(order_id)})
        self.dispatcher.submit(send_customer_confirmation, order_id)
        self.dispatcher.submit(send_admin_notification, order_id)

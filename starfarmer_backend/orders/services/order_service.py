# orders/services/order_service.py

"""
ORDER LIFECYCLE CONTROLLER

The only writer of Order payment state.

Operations:
- create_cash_order()          -> Order (not_applicable / processing)
- initiate_online_payment()    -> PaymentStart(order, redirect_url)
- reconcile_callback()         -> CallbackAck(status_code, message)
- update_fulfillment_status()  -> Order (admin only)
- status_by_transaction()      -> Order (owner or admin)

Concurrency:
- Payment transitions are ONE conditional UPDATE ... WHERE payment_status='pending'.
  The row count decides which of two racing callbacks wins; the loser no-ops.
- Notifications are scheduled with transaction.on_commit and only by the winner.

Collaborators (config, gateway client, callback verifier, notifier) are
injected; build_order_service() wires the production ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.apps import apps
from django.db import DatabaseError, transaction
from django.utils import timezone

from orders.models import Order
from orders.services import order_lifecycle
from orders.services.exceptions import (
    OrderNotFoundError,
    OrderPermissionError,
    OrderPersistenceError,
    OrderValidationError,
    PaymentInitiationError,
)
from orders.services.order_factory import (
    OrderLine,
    new_cash_order,
    new_online_order,
    persist_new_order,
)
from payments.services.callback import CallbackVerifier
from payments.services.exceptions import (
    CallbackPayloadError,
    GatewayCallError,
    GatewayTimeoutError,
    SignatureError,
)
from payments.services.phonepe import PhonePeClient
from payments.services.transaction_ids import generate_merchant_transaction_id
from products.models import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentStart:
    order: Order
    redirect_url: str


@dataclass(frozen=True)
class CallbackAck:
    status_code: int
    message: str


ACK_PROCESSED = CallbackAck(200, "Callback processed successfully.")
ACK_ALREADY_PROCESSED = CallbackAck(200, "Already processed.")
ACK_MISSING_MTID = CallbackAck(200, "Callback acknowledged, missing merchant transaction ID.")
ACK_ORDER_NOT_FOUND = CallbackAck(200, "Order not found, acknowledged.")
ACK_INTERNAL_ERROR = CallbackAck(500, "Internal Server Error processing callback.")


def _is_admin(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_admin", False))


def resolve_lines(items) -> list[OrderLine]:
    """
    [{"product_id": uuid, "quantity": int}, ...] -> [OrderLine]

    Unknown or inactive products are a validation error.
    """
    if not items:
        raise OrderValidationError("Order must contain at least one item")

    product_ids = [str(line["product_id"]) for line in items]
    products = {
        str(p.id): p for p in Product.objects.filter(id__in=product_ids, is_active=True)
    }

    lines = []
    for line in items:
        product = products.get(str(line["product_id"]))
        if product is None:
            raise OrderValidationError(f"Product {line['product_id']} is not available")
        lines.append(OrderLine(product=product, quantity=line["quantity"]))
    return lines


class OrderService:
    def __init__(self, *, config, gateway=None, verifier=None, notifier=None):
        self.config = config
        self.gateway = gateway if gateway is not None else PhonePeClient(config)
        self.verifier = verifier if verifier is not None else CallbackVerifier(config)
        self.notifier = notifier

    # -------------------------
    # Checkout
    # -------------------------
    def create_cash_order(self, *, user, items, shipping_address, shipping_charge, total) -> Order:
        order, order_items = new_cash_order(
            user=user,
            lines=resolve_lines(items),
            shipping_address=shipping_address,
            shipping_charge=shipping_charge,
            total=total,
        )

        try:
            with transaction.atomic():
                persist_new_order(order, order_items)
                self._notify_confirmed(order)
        except DatabaseError as exc:
            logger.exception("Cash order could not be saved", extra={"user_id": str(user.pk)})
            raise OrderPersistenceError("Order could not be saved") from exc

        logger.info(
            "Cash order created",
            extra={"order_id": str(order.id), "total": str(order.total)},
        )
        return order

    def initiate_online_payment(self, *, user, items, shipping_address, shipping_charge, total) -> PaymentStart:
        """
        Creates the pending order, then calls the gateway OUTSIDE the
        transaction so the order row is committed before the network call.

        Raises GatewayConfigError before anything is written.
        """
        self.config.require()

        order, order_items = new_online_order(
            user=user,
            lines=resolve_lines(items),
            shipping_address=shipping_address,
            shipping_charge=shipping_charge,
            total=total,
            merchant_transaction_id=generate_merchant_transaction_id(),
        )

        try:
            persist_new_order(order, order_items)
        except DatabaseError as exc:
            logger.exception("Online order could not be saved", extra={"user_id": str(user.pk)})
            raise OrderPersistenceError("Order could not be saved") from exc

        mtid = order.merchant_transaction_id
        logger.info(
            "Online order created; initiating PhonePe payment",
            extra={"order_id": str(order.id), "merchant_transaction_id": mtid},
        )

        try:
            initiation = self.gateway.initiate(order, user)
        except GatewayTimeoutError as exc:
            # Outcome unknown at the gateway: stay pending, callback decides.
            logger.warning(
                "PhonePe initiation timed out; order left pending",
                extra={"order_id": str(order.id), "merchant_transaction_id": mtid},
            )
            raise PaymentInitiationError(
                exc.message, order=order, timed_out=True
            ) from exc
        except GatewayCallError as exc:
            self._mark_initiation_failed(order)
            raise PaymentInitiationError(
                exc.message, order=order, http_status=exc.http_status
            ) from exc

        return PaymentStart(order=order, redirect_url=initiation.redirect_url)

    def _mark_initiation_failed(self, order: Order) -> None:
        updated = Order.objects.filter(
            pk=order.pk,
            payment_status__in=order_lifecycle.payment_sources(Order.PAYMENT_FAILED),
        ).update(
            payment_status=Order.PAYMENT_FAILED,
            status=Order.STATUS_PAYMENT_FAILED,
            updated_at=timezone.now(),
        )
        logger.warning(
            "PhonePe initiation failed; order marked payment_failed",
            extra={
                "order_id": str(order.id),
                "merchant_transaction_id": order.merchant_transaction_id,
                "updated": updated,
            },
        )
        order.refresh_from_db()

    # -------------------------
    # Gateway callback
    # -------------------------
    def reconcile_callback(self, *, payload_b64, x_verify) -> CallbackAck:
        """
        Verify -> decode -> correlate -> idempotency gate -> conditional update.

        Always 200 once the notification is verified, except on a storage
        failure (500 invites the gateway to retry).
        """
        try:
            notification = self.verifier.verify(payload_b64, x_verify)
        except (CallbackPayloadError, SignatureError) as exc:
            logger.warning("PhonePe callback rejected", extra={"reason": str(exc)})
            return CallbackAck(400, str(exc))

        mtid = notification.merchant_transaction_id
        if not mtid:
            logger.warning("PhonePe callback without merchantTransactionId")
            return ACK_MISSING_MTID

        try:
            return self._apply_callback(notification)
        except DatabaseError:
            logger.exception(
                "PhonePe callback could not be persisted",
                extra={"merchant_transaction_id": mtid},
            )
            return ACK_INTERNAL_ERROR

    def _apply_callback(self, notification) -> CallbackAck:
        mtid = notification.merchant_transaction_id

        order = Order.objects.filter(merchant_transaction_id=mtid).first()
        if order is None:
            logger.warning(
                "PhonePe callback for unknown order",
                extra={"merchant_transaction_id": mtid},
            )
            return ACK_ORDER_NOT_FOUND

        if order_lifecycle.is_payment_final(order.payment_status):
            logger.info(
                "PhonePe callback ignored; order already finalized",
                extra={"order_id": str(order.id), "payment_status": order.payment_status},
            )
            return ACK_ALREADY_PROCESSED

        payment_status, status = order_lifecycle.classify_callback(
            notification, order_total=order.total
        )

        if status == Order.STATUS_PAYMENT_ISSUE:
            logger.warning(
                "PhonePe amount mismatch; order flagged payment_issue",
                extra={
                    "order_id": str(order.id),
                    "expected": str(order.total),
                    "received_minor_units": notification.amount,
                },
            )
        elif payment_status == Order.PAYMENT_FAILED:
            logger.warning(
                "PhonePe payment not successful",
                extra={
                    "order_id": str(order.id),
                    "code": notification.code,
                    "state": notification.state,
                    "response_code": notification.response_code,
                },
            )

        with transaction.atomic():
            updated = Order.objects.filter(
                pk=order.pk,
                payment_status__in=order_lifecycle.payment_sources(payment_status),
            ).update(
                payment_status=payment_status,
                status=status,
                gateway_transaction_id=notification.gateway_transaction_id,
                updated_at=timezone.now(),
            )

            if updated == 0:
                # Lost the race to a concurrent delivery.
                logger.info(
                    "PhonePe callback lost race; already finalized",
                    extra={"order_id": str(order.id)},
                )
                return ACK_ALREADY_PROCESSED

            if payment_status == Order.PAYMENT_PAID:
                self._notify_confirmed(order)

        logger.info(
            "PhonePe callback applied",
            extra={
                "order_id": str(order.id),
                "payment_status": payment_status,
                "status": status,
            },
        )
        return ACK_PROCESSED

    # -------------------------
    # Admin / read paths
    # -------------------------
    def update_fulfillment_status(self, *, order_id, new_status, actor) -> Order:
        if not _is_admin(actor):
            raise OrderPermissionError("Only admins can update order status.")

        target = order_lifecycle.validate_fulfillment_status(new_status)

        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_id).first()
            if order is None:
                raise OrderNotFoundError("No order found with that ID")

            previous = order.status
            if previous != target:
                order.status = target
                order.save(update_fields=["status", "updated_at"])

        logger.info(
            "Order status updated",
            extra={"order_id": str(order.id), "from": previous, "to": target},
        )
        return order

    def status_by_transaction(self, *, merchant_transaction_id, user) -> Order:
        order = Order.objects.filter(merchant_transaction_id=merchant_transaction_id).first()
        if order is None or not (_is_admin(user) or order.user_id == user.pk):
            raise OrderNotFoundError("No order found for that transaction")
        return order

    # -------------------------
    # Side effects
    # -------------------------
    def _notify_confirmed(self, order: Order) -> None:
        if self.notifier is not None:
            self.notifier.order_confirmed(order.id)


def build_order_service() -> OrderService:
    from notifications.services.order_notifier import OrderEmailNotifier

    config = apps.get_app_config("payments").phonepe_config
    return OrderService(config=config, notifier=OrderEmailNotifier())

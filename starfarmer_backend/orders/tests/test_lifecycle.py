# orders/tests/test_lifecycle.py

from decimal import Decimal

from django.test import SimpleTestCase

from orders.models import Order
from orders.services import order_lifecycle
from orders.services.exceptions import InvalidOrderStatusError
from payments.services.callback import CallbackNotification


def _notification(*, success=True, amount=50000, code="PAYMENT_SUCCESS"):
    return CallbackNotification(
        success=success,
        code=code,
        message="",
        merchant_transaction_id="MT_1",
        gateway_transaction_id="T1",
        state="COMPLETED" if success else "FAILED",
        response_code="SUCCESS" if success else "ZA",
        amount=amount,
    )


class OrderLifecycleTests(SimpleTestCase):
    """
    Pure domain rule tests (no DB).
    """

    def test_only_pending_orders_can_be_settled(self):
        for target in (Order.PAYMENT_PAID, Order.PAYMENT_FAILED):
            with self.subTest(target=target):
                self.assertEqual(
                    order_lifecycle.payment_sources(target),
                    frozenset({Order.PAYMENT_PENDING}),
                )

    def test_nothing_moves_back_to_pending(self):
        self.assertEqual(order_lifecycle.payment_sources(Order.PAYMENT_PENDING), frozenset())
        self.assertEqual(
            order_lifecycle.payment_sources(Order.PAYMENT_NOT_APPLICABLE), frozenset()
        )

    def test_final_payment_states(self):
        self.assertTrue(order_lifecycle.is_payment_final(Order.PAYMENT_PAID))
        self.assertTrue(order_lifecycle.is_payment_final(Order.PAYMENT_FAILED))
        self.assertFalse(order_lifecycle.is_payment_final(Order.PAYMENT_PENDING))

    def test_success_with_matching_amount(self):
        self.assertEqual(
            order_lifecycle.classify_callback(_notification(), order_total=Decimal("500.00")),
            (Order.PAYMENT_PAID, Order.STATUS_PROCESSING),
        )

    def test_success_with_mismatched_amount(self):
        self.assertEqual(
            order_lifecycle.classify_callback(
                _notification(amount=40000), order_total=Decimal("500.00")
            ),
            (Order.PAYMENT_PAID, Order.STATUS_PAYMENT_ISSUE),
        )

    def test_success_without_amount_is_flagged(self):
        for amount in (None, "abc", True, 49999.6, "50000.4", float("nan")):
            with self.subTest(amount=amount):
                self.assertEqual(
                    order_lifecycle.classify_callback(
                        _notification(amount=amount), order_total=Decimal("500.00")
                    ),
                    (Order.PAYMENT_PAID, Order.STATUS_PAYMENT_ISSUE),
                )

    def test_failure(self):
        self.assertEqual(
            order_lifecycle.classify_callback(
                _notification(success=False, code="PAYMENT_ERROR"),
                order_total=Decimal("500.00"),
            ),
            (Order.PAYMENT_FAILED, Order.STATUS_PAYMENT_FAILED),
        )

    def test_fulfillment_status_validation(self):
        self.assertEqual(order_lifecycle.validate_fulfillment_status(" shipped "), "shipped")

        with self.assertRaises(InvalidOrderStatusError):
            order_lifecycle.validate_fulfillment_status("teleported")

    def test_amount_is_compared_in_whole_paise(self):
        total = Decimal("500.00")
        for amount in (50000, "50000", 50000.0, Decimal("50000")):
            with self.subTest(amount=amount):
                self.assertTrue(
                    order_lifecycle.amount_matches(paid_minor_units=amount, order_total=total)
                )

        for amount in (49999.6, 50000.4, "49999.5", 49999, 50001):
            with self.subTest(amount=amount):
                self.assertFalse(
                    order_lifecycle.amount_matches(paid_minor_units=amount, order_total=total)
                )

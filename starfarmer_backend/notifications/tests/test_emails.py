# notifications/tests/test_emails.py

from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from notifications.services.dispatcher import NotificationDispatcher
from notifications.services.email import (
    send_order_confirmation,
    send_order_notification_to_admin,
)
from notifications.services.order_notifier import OrderEmailNotifier
from orders.tests.factories import make_cash_order, make_customer
from products.tests.factories import make_product


class OrderEmailTests(TestCase):
    def setUp(self):
        self.customer = make_customer(email="shetkari@example.com")
        self.product = make_product(
            name_en="Tomato Seeds Hybrid",
            price=Decimal("90.00"),
            discounted_price=Decimal("75.50"),
        )
        self.order = make_cash_order(
            user=self.customer, product=self.product, quantity=2, shipping_charge=Decimal("40.00")
        )

    def test_customer_confirmation(self):
        send_order_confirmation("shetkari@example.com", self.order)

        self.assertEqual(len(mail.outbox), 1)
        msg = mail.outbox[0]
        self.assertEqual(msg.subject, "Order Confirmation - Star Farmer")
        self.assertEqual(msg.to, ["shetkari@example.com"])
        self.assertIn(str(self.order.id), msg.body)
        self.assertIn("Tomato Seeds Hybrid", msg.body)
        self.assertIn("191.00", msg.body)

        html, mimetype = msg.alternatives[0]
        self.assertEqual(mimetype, "text/html")
        self.assertIn("Quantity: 2", html)

    def test_confirmation_requires_an_address(self):
        with self.assertRaises(ValueError):
            send_order_confirmation("", self.order)
        self.assertEqual(mail.outbox, [])

    def test_admin_notification_includes_customer(self):
        send_order_notification_to_admin(self.order)

        msg = mail.outbox[0]
        self.assertEqual(msg.subject, "New Order Received - Star Farmer")
        self.assertEqual(msg.to, ["admin@starfarmer.test"])
        self.assertIn("shetkari@example.com", msg.body)

    @override_settings(ADMIN_EMAIL="")
    def test_admin_notification_skipped_without_admin_email(self):
        self.assertEqual(send_order_notification_to_admin(self.order), 0)
        self.assertEqual(mail.outbox, [])


class OrderEmailNotifierTests(TestCase):
    def setUp(self):
        self.customer = make_customer()
        self.product = make_product()
        self.order = make_cash_order(user=self.customer, product=self.product)
        self.notifier = OrderEmailNotifier(
            dispatcher=NotificationDispatcher(run_async=False, max_attempts=2, backoff_seconds=0)
        )

    def test_emails_are_sent_after_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self.notifier.order_confirmed(self.order.id)

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(mail.outbox, [])

        callbacks[0]()
        self.assertEqual(len(mail.outbox), 2)

    def test_delivery_failure_never_reaches_the_caller(self):
        with mock.patch(
            "notifications.services.email.send_mail", side_effect=OSError("smtp down")
        ) as send:
            with self.captureOnCommitCallbacks(execute=True):
                self.notifier.order_confirmed(self.order.id)

        # two jobs, two attempts each
        self.assertEqual(send.call_count, 4)
        self.assertEqual(mail.outbox, [])

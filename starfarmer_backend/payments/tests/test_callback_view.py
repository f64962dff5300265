# payments/tests/test_callback_view.py

"""
PHONEPE CALLBACK ENDPOINT TESTS

The gateway only reads the status code and plain-text body.
"""

from decimal import Decimal

from django.core import mail
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order
from orders.tests.factories import make_customer, make_online_order
from payments.tests.factories import failed_callback, signed_callback
from products.tests.factories import make_product


class PhonePeCallbackViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("payments:phonepe-callback")

        self.customer = make_customer()
        self.product = make_product(price=Decimal("550.00"), discounted_price=Decimal("500.00"))
        self.order = make_online_order(user=self.customer, product=self.product, mtid="MT_view_1")

    def _post(self, payload, x_verify):
        headers = {"HTTP_X_VERIFY": x_verify} if x_verify is not None else {}
        return self.client.post(self.url, {"response": payload}, format="json", **headers)

    def test_success_marks_order_paid_and_emails_once(self):
        payload, x_verify = signed_callback("MT_view_1", amount=50000, transaction_id="T9001")

        with self.captureOnCommitCallbacks(execute=True):
            response = self._post(payload, x_verify)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.content.decode(), "Callback processed successfully.")
        self.assertTrue(response["Content-Type"].startswith("text/plain"))

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PAID)
        self.assertEqual(self.order.status, Order.STATUS_PROCESSING)
        self.assertEqual(self.order.gateway_transaction_id, "T9001")

        self.assertEqual(len(mail.outbox), 2)
        recipients = sorted(msg.to[0] for msg in mail.outbox)
        self.assertEqual(recipients, ["admin@starfarmer.test", "farmer@example.com"])

    def test_redelivery_is_acknowledged_without_side_effects(self):
        payload, x_verify = signed_callback("MT_view_1", amount=50000)

        with self.captureOnCommitCallbacks(execute=True):
            self._post(payload, x_verify)
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self._post(payload, x_verify)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.content.decode(), "Already processed.")
        self.assertEqual(callbacks, [])
        self.assertEqual(len(mail.outbox), 2)

    def test_trailing_slash_is_optional(self):
        payload, x_verify = failed_callback("MT_view_1")

        response = self.client.post(
            "/api/payments/phonepe-callback",
            {"response": payload},
            format="json",
            HTTP_X_VERIFY=x_verify,
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_FAILED)
        self.assertEqual(self.order.status, Order.STATUS_PAYMENT_FAILED)

    def test_invalid_checksum_is_rejected_and_order_untouched(self):
        payload, _ = signed_callback("MT_view_1", amount=50000)
        _, wrong = signed_callback("MT_someone_else", amount=50000)

        with self.captureOnCommitCallbacks(execute=True):
            response = self._post(payload, wrong)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.content.decode(), "Checksum mismatch")

        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)
        self.assertEqual(self.order.status, Order.STATUS_PAYMENT_PENDING)
        self.assertEqual(mail.outbox, [])

    def test_missing_header_is_rejected(self):
        payload, _ = signed_callback("MT_view_1")

        response = self._post(payload, None)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.content.decode(), "Invalid callback: Missing verification header")

    def test_missing_payload_is_rejected(self):
        response = self.client.post(self.url, {}, format="json", HTTP_X_VERIFY="abc###1")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.content.decode(), "Invalid callback: Missing response payload")

    def test_malformed_json_body_gets_plain_text_rejection(self):
        response = self.client.post(
            self.url, data="{not json", content_type="application/json", HTTP_X_VERIFY="abc###1"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response["Content-Type"].startswith("text/plain"))
        self.assertEqual(response.content.decode(), "Invalid callback: Missing response payload")

    def test_non_json_body_gets_plain_text_rejection(self):
        response = self.client.post(
            self.url, data="response=abc", content_type="text/plain", HTTP_X_VERIFY="abc###1"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response["Content-Type"].startswith("text/plain"))
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, Order.PAYMENT_PENDING)

    def test_unknown_transaction_is_acknowledged(self):
        payload, x_verify = signed_callback("MT_does_not_exist")

        response = self._post(payload, x_verify)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.content.decode(), "Order not found, acknowledged.")

    def test_missing_transaction_id_is_acknowledged(self):
        payload, x_verify = signed_callback(None)

        response = self._post(payload, x_verify)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.content.decode(),
            "Callback acknowledged, missing merchant transaction ID.",
        )

    def test_bearer_token_is_not_required(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")
        payload, x_verify = signed_callback("MT_view_1", amount=50000)

        response = self._post(payload, x_verify)

        self.assertEqual(response.status_code, status.HTTP_200_OK)

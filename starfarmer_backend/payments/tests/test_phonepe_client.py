# payments/tests/test_phonepe_client.py

import base64
import dataclasses
import http.client
import io
import json
from decimal import Decimal
from types import SimpleNamespace
from unittest import mock
from urllib.error import HTTPError, URLError

from django.test import SimpleTestCase

from payments.config import PhonePeConfig
from payments.services import checksum
from payments.services.exceptions import (
    AmountNotRepresentableError,
    GatewayCallError,
    GatewayConfigError,
    GatewayTimeoutError,
)
from payments.services.phonepe import (
    PhonePeClient,
    normalize_mobile,
    parse_minor_units,
    to_minor_units,
)
from payments.tests.factories import TEST_CONFIG

REDIRECT = "https://mercury-uat.phonepe.com/transact/pg?token=abc123"


def _ok_response(url=REDIRECT) -> bytes:
    return json.dumps(
        {
            "success": True,
            "code": "PAYMENT_INITIATED",
            "message": "Payment initiated",
            "data": {
                "merchantId": "MERCHANTUAT",
                "merchantTransactionId": "MT_abc",
                "instrumentResponse": {
                    "type": "PAY_PAGE",
                    "redirectInfo": {"url": url, "method": "GET"},
                },
            },
        }
    ).encode("utf-8")


def _mock_response(mock_urlopen, body: bytes):
    mock_urlopen.return_value.__enter__.return_value.read.return_value = body


class AmountHelpersTests(SimpleTestCase):
    def test_rupees_to_paise(self):
        self.assertEqual(to_minor_units(Decimal("500.00")), 50000)
        self.assertEqual(to_minor_units(Decimal("266.50")), 26650)
        self.assertEqual(to_minor_units("1"), 100)

    def test_sub_paise_amount_is_rejected(self):
        with self.assertRaises(AmountNotRepresentableError):
            to_minor_units(Decimal("10.005"))

    def test_non_numeric_amount_is_rejected(self):
        with self.assertRaises(AmountNotRepresentableError):
            to_minor_units("ten")

    def test_gateway_amount_must_be_whole_paise(self):
        self.assertEqual(parse_minor_units(40000), 40000)
        self.assertEqual(parse_minor_units("40000"), 40000)
        self.assertEqual(parse_minor_units(40000.0), 40000)
        for junk in ("abc", 39999.6, "40000.5", True, None):
            with self.subTest(junk=junk):
                with self.assertRaises(ValueError):
                    parse_minor_units(junk)

    def test_mobile_keeps_last_ten_digits(self):
        self.assertEqual(normalize_mobile("+91 98765-43210"), "9876543210")
        self.assertEqual(normalize_mobile("09876543210"), "9876543210")
        self.assertEqual(normalize_mobile(None), "")


class PhonePeClientTests(SimpleTestCase):
    """
    GUARANTEES:
    - Payload carries paise, ?mtid= redirect, PAY_PAGE instrument
    - X-VERIFY is the pay-request checksum of the exact body sent
    - Bounded timeout; timeouts are distinguishable from rejections
    """

    def setUp(self):
        self.client_ = PhonePeClient(TEST_CONFIG)
        self.user = SimpleNamespace(id="8c1f7a0e-user")
        self.order = SimpleNamespace(
            merchant_transaction_id="MT_abc",
            total=Decimal("500.00"),
            shipping_address={"phone": "+91 98765 43210"},
            user_id="8c1f7a0e-user",
        )

    def test_build_payload(self):
        payload = self.client_.build_payload(
            merchant_transaction_id="MT_abc",
            amount=Decimal("500.00"),
            user_id="u-1",
            mobile="+91-9876543210",
        )

        self.assertEqual(payload["merchantId"], "MERCHANTUAT")
        self.assertEqual(payload["merchantTransactionId"], "MT_abc")
        self.assertEqual(payload["merchantUserId"], "u-1")
        self.assertEqual(payload["amount"], 50000)
        self.assertEqual(payload["redirectUrl"], "https://shop.test/payment-status?mtid=MT_abc")
        self.assertEqual(payload["redirectMode"], "REDIRECT")
        self.assertEqual(payload["callbackUrl"], TEST_CONFIG.callback_url)
        self.assertEqual(payload["paymentInstrument"], {"type": "PAY_PAGE"})
        self.assertEqual(payload["mobileNumber"], "9876543210")

    def test_short_mobile_is_omitted(self):
        payload = self.client_.build_payload(
            merchant_transaction_id="MT_abc", amount="1.00", user_id="u-1", mobile="12345"
        )
        self.assertNotIn("mobileNumber", payload)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_initiate_posts_signed_request(self, mock_urlopen):
        _mock_response(mock_urlopen, _ok_response())

        result = self.client_.initiate(self.order, self.user)

        self.assertEqual(result.redirect_url, REDIRECT)
        self.assertEqual(result.merchant_transaction_id, "MT_abc")

        req = mock_urlopen.call_args[0][0]
        self.assertEqual(req.full_url, TEST_CONFIG.pay_api_url)
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(mock_urlopen.call_args.kwargs["timeout"], 5.0)

        payload_b64 = json.loads(req.data.decode("utf-8"))["request"]
        self.assertEqual(
            req.get_header("X-verify"),
            checksum.sign(payload_b64, TEST_CONFIG.salt_key, TEST_CONFIG.salt_index),
        )

        payload = json.loads(base64.b64decode(payload_b64))
        self.assertEqual(payload["amount"], 50000)
        self.assertEqual(payload["merchantUserId"], "8c1f7a0e-user")
        self.assertEqual(payload["mobileNumber"], "9876543210")

    @mock.patch("payments.services.phonepe.urlopen")
    def test_unsuccessful_body_is_a_call_error(self, mock_urlopen):
        _mock_response(
            mock_urlopen,
            json.dumps({"success": False, "code": "BAD_REQUEST", "message": "Invalid amount"}).encode(),
        )

        with self.assertRaises(GatewayCallError) as ctx:
            self.client_.initiate(self.order, self.user)

        self.assertNotIsInstance(ctx.exception, GatewayTimeoutError)
        self.assertEqual(ctx.exception.code, "BAD_REQUEST")
        self.assertEqual(ctx.exception.message, "Invalid amount")

    @mock.patch("payments.services.phonepe.urlopen")
    def test_missing_redirect_url_is_a_call_error(self, mock_urlopen):
        _mock_response(mock_urlopen, json.dumps({"success": True, "data": {}}).encode())

        with self.assertRaises(GatewayCallError):
            self.client_.initiate(self.order, self.user)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_http_error_carries_status(self, mock_urlopen):
        mock_urlopen.side_effect = HTTPError(
            TEST_CONFIG.pay_api_url,
            401,
            "Unauthorized",
            hdrs=None,
            fp=io.BytesIO(b'{"success":false,"code":"UNAUTHORIZED","message":"Key not found"}'),
        )

        with self.assertRaises(GatewayCallError) as ctx:
            self.client_.initiate(self.order, self.user)

        self.assertEqual(ctx.exception.http_status, 401)
        self.assertEqual(ctx.exception.message, "Key not found")

    @mock.patch("payments.services.phonepe.urlopen")
    def test_timeout_is_reported_as_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = URLError(TimeoutError("timed out"))

        with self.assertRaises(GatewayTimeoutError):
            self.client_.initiate(self.order, self.user)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_socket_timeout_is_reported_as_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = TimeoutError("read timed out")

        with self.assertRaises(GatewayTimeoutError):
            self.client_.initiate(self.order, self.user)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_connection_refused_is_not_a_timeout(self, mock_urlopen):
        mock_urlopen.side_effect = URLError(ConnectionRefusedError("refused"))

        with self.assertRaises(GatewayCallError) as ctx:
            self.client_.initiate(self.order, self.user)

        self.assertNotIsInstance(ctx.exception, GatewayTimeoutError)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_non_json_response_is_a_call_error(self, mock_urlopen):
        _mock_response(mock_urlopen, b"<html>maintenance</html>")

        with self.assertRaises(GatewayCallError):
            self.client_.initiate(self.order, self.user)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_unconfigured_client_never_calls_out(self, mock_urlopen):
        client = PhonePeClient(PhonePeConfig(merchant_id="MERCHANTUAT"))

        with self.assertRaises(GatewayConfigError):
            client.initiate(self.order, self.user)

        mock_urlopen.assert_not_called()

    @mock.patch("payments.services.phonepe.urlopen")
    def test_truncated_response_is_a_call_error(self, mock_urlopen):
        mock_urlopen.return_value.__enter__.return_value.read.side_effect = (
            http.client.IncompleteRead(b"{")
        )

        with self.assertRaises(GatewayCallError) as ctx:
            self.client_.initiate(self.order, self.user)

        self.assertNotIsInstance(ctx.exception, GatewayTimeoutError)
        self.assertIsInstance(ctx.exception.__cause__, http.client.IncompleteRead)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_bad_status_line_is_a_call_error(self, mock_urlopen):
        mock_urlopen.side_effect = http.client.BadStatusLine("garbage")

        with self.assertRaises(GatewayCallError):
            self.client_.initiate(self.order, self.user)

    @mock.patch("payments.services.phonepe.urlopen")
    def test_malformed_pay_api_url_is_a_call_error(self, mock_urlopen):
        client = PhonePeClient(
            dataclasses.replace(TEST_CONFIG, pay_api_url="phonepe-uat/pg/v1/pay")
        )

        with self.assertRaises(GatewayCallError):
            client.initiate(self.order, self.user)

        mock_urlopen.assert_not_called()

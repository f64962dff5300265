# payments/tests/factories.py

"""
Helpers for building PhonePe callbacks the way the gateway signs them.
"""

from __future__ import annotations

import base64
import json

from payments.config import PhonePeConfig
from payments.services import checksum

TEST_CONFIG = PhonePeConfig(
    merchant_id="MERCHANTUAT",
    salt_key="test-salt-key",
    salt_index="1",
    pay_api_url="https://gateway.test/pg/v1/pay",
    redirect_url="https://shop.test/payment-status",
    callback_url="https://api.shop.test/api/payments/phonepe-callback/",
    timeout_seconds=5.0,
)


def callback_body(
    merchant_transaction_id,
    *,
    amount=50000,
    success=True,
    code="PAYMENT_SUCCESS",
    state="COMPLETED",
    response_code="SUCCESS",
    transaction_id="T2406151234567",
) -> dict:
    data = {
        "merchantId": TEST_CONFIG.merchant_id,
        "transactionId": transaction_id,
        "state": state,
        "responseCode": response_code,
    }
    if merchant_transaction_id is not None:
        data["merchantTransactionId"] = merchant_transaction_id
    if amount is not None:
        data["amount"] = amount

    return {
        "success": success,
        "code": code,
        "message": "Your payment is successful." if success else "Payment failed",
        "data": data,
    }


def signed_callback(merchant_transaction_id, *, config=TEST_CONFIG, **kwargs) -> tuple[str, str]:
    """(base64 response, X-VERIFY) as PhonePe would send them."""
    body = callback_body(merchant_transaction_id, **kwargs)
    payload_b64 = base64.b64encode(json.dumps(body).encode("utf-8")).decode("ascii")
    x_verify = checksum.callback_checksum(payload_b64, config.salt_key, config.salt_index)
    return payload_b64, x_verify


def failed_callback(merchant_transaction_id, **kwargs) -> tuple[str, str]:
    kwargs.setdefault("success", False)
    kwargs.setdefault("code", "PAYMENT_ERROR")
    kwargs.setdefault("state", "FAILED")
    kwargs.setdefault("response_code", "ZA")
    return signed_callback(merchant_transaction_id, **kwargs)

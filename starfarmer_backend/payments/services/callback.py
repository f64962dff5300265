# payments/services/callback.py

"""
PHONEPE CALLBACK VERIFIER

Inbound (server-to-server):
- body:   {"response": "<base64 JSON>"}
- header: X-VERIFY: sha256(response + salt_key) + "###" + salt_index

Nothing is decoded before the checksum verifies.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field

from payments.config import PhonePeConfig
from payments.services import checksum
from payments.services.exceptions import CallbackPayloadError, SignatureError

logger = logging.getLogger(__name__)

SUCCESS_CODE = "PAYMENT_SUCCESS"
SUCCESS_STATE = "COMPLETED"
SUCCESS_RESPONSE_CODE = "SUCCESS"


@dataclass(frozen=True)
class CallbackNotification:
    success: bool
    code: str
    message: str
    merchant_transaction_id: str
    gateway_transaction_id: str
    state: str
    response_code: str
    amount: object = None
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_payment_success(self) -> bool:
        return (
            self.success is True
            and self.code == SUCCESS_CODE
            and self.state == SUCCESS_STATE
            and self.response_code == SUCCESS_RESPONSE_CODE
        )

    @classmethod
    def from_payload(cls, decoded: dict) -> "CallbackNotification":
        data = decoded.get("data")
        if not isinstance(data, dict):
            data = {}

        return cls(
            success=decoded.get("success") is True,
            code=str(decoded.get("code") or ""),
            message=str(decoded.get("message") or ""),
            merchant_transaction_id=str(data.get("merchantTransactionId") or "").strip(),
            gateway_transaction_id=str(data.get("transactionId") or "").strip(),
            state=str(data.get("state") or ""),
            response_code=str(data.get("responseCode") or ""),
            amount=data.get("amount"),
            raw=decoded,
        )


def decode_response(payload_b64: str) -> dict:
    try:
        raw = base64.b64decode(payload_b64, validate=False)
        decoded = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise CallbackPayloadError("Callback payload is not valid base64 JSON") from exc

    if not isinstance(decoded, dict):
        raise CallbackPayloadError("Callback payload must be a JSON object")
    return decoded


class CallbackVerifier:
    def __init__(self, config: PhonePeConfig):
        self.config = config

    def verify(self, payload_b64, received_checksum) -> CallbackNotification:
        """
        Raises:
        - CallbackPayloadError: missing or undecodable payload
        - SignatureError: missing header / checksum mismatch
        """
        if not payload_b64 or not isinstance(payload_b64, str):
            raise CallbackPayloadError("Invalid callback: Missing response payload")

        if not received_checksum:
            raise SignatureError("Invalid callback: Missing verification header")

        cfg = self.config
        if not cfg.salt_key:
            logger.error("PhonePe salt key is not configured; rejecting callback")
        if not checksum.verify(payload_b64, received_checksum, cfg.salt_key, cfg.salt_index):
            logger.warning("PhonePe callback checksum mismatch")
            raise SignatureError("Checksum mismatch")

        return CallbackNotification.from_payload(decode_response(payload_b64))

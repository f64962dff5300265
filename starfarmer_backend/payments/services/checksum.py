# payments/services/checksum.py

"""
PHONEPE CHECKSUM (X-VERIFY)

Format: "<sha256 hex>###<salt index>"

Signing strings differ by direction:
- outbound pay request: base64 payload + "/pg/v1/pay" + salt key
- inbound callback:     base64 payload + salt key
"""

from __future__ import annotations

import hashlib
import hmac

PAY_API_PATH = "/pg/v1/pay"
SEPARATOR = "###"


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def sign(payload_b64: str, salt_key: str, salt_index: str) -> str:
    """Checksum for an outbound pay request."""
    return f"{_digest(payload_b64 + PAY_API_PATH + salt_key)}{SEPARATOR}{salt_index}"


def callback_checksum(payload_b64: str, salt_key: str, salt_index: str) -> str:
    """Checksum the gateway attaches to a server-to-server callback."""
    return f"{_digest(payload_b64 + salt_key)}{SEPARATOR}{salt_index}"


def verify(payload_b64, received_checksum, salt_key, salt_index) -> bool:
    """
    True only when received_checksum matches the callback-mode checksum exactly.
    Never raises.
    """
    if not isinstance(payload_b64, str) or not isinstance(received_checksum, str):
        return False
    if not payload_b64 or not received_checksum or not salt_key:
        return False

    expected = callback_checksum(payload_b64, str(salt_key), str(salt_index))
    return hmac.compare_digest(
        expected.encode("utf-8"), received_checksum.encode("utf-8")
    )

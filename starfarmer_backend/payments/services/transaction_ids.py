# payments/services/transaction_ids.py

from __future__ import annotations

import uuid

MERCHANT_TRANSACTION_PREFIX = "MT_"


def generate_merchant_transaction_id() -> str:
    """
    MT_ + 32 hex chars from uuid4 (os.urandom backed), 35 chars total.

    PhonePe caps merchantTransactionId at 38 chars.
    """
    return f"{MERCHANT_TRANSACTION_PREFIX}{uuid.uuid4().hex}"

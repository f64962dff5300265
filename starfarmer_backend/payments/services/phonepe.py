# payments/services/phonepe.py

"""
PHONEPE GATEWAY CLIENT (PAY API)

Flow:
1) Build payload (amount in paise, redirect carries ?mtid=..., PAY_PAGE instrument)
2) JSON -> base64 -> X-VERIFY checksum
3) POST {"request": <base64>} to the pay API (bounded timeout)
4) success + instrumentResponse.redirectInfo.url -> PaymentInitiation
   anything else -> GatewayCallError (GatewayTimeoutError on timeout)

The client is stateless: it never touches the Order row. The caller decides
what to persist from the result.
"""

from __future__ import annotations

import base64
import http.client
import json
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urlsplit, urlunsplit
from urllib.request import Request, urlopen

from payments.config import PhonePeConfig
from payments.services import checksum
from payments.services.exceptions import (
    AmountNotRepresentableError,
    GatewayCallError,
    GatewayTimeoutError,
)

logger = logging.getLogger(__name__)

PAISE_PER_RUPEE = Decimal("100")
REDIRECT_MODE = "REDIRECT"
PAY_PAGE_INSTRUMENT = {"type": "PAY_PAGE"}

_NON_DIGITS = re.compile(r"\D+")


def to_minor_units(amount) -> int:
    """
    Rupees -> paise. Rejects amounts that are not whole paise (e.g. 10.005).
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise AmountNotRepresentableError(f"Invalid amount: {amount!r}") from exc

    if not value.is_finite():
        raise AmountNotRepresentableError(f"Invalid amount: {amount!r}")

    paise = value * PAISE_PER_RUPEE
    if paise != paise.to_integral_value():
        raise AmountNotRepresentableError(
            f"Amount {value} is not representable in whole paise"
        )
    return int(paise)


def parse_minor_units(paise) -> int:
    """
    Gateway amount -> whole paise. Raises ValueError unless the value is an
    integral number (50000, "50000" and 50000.0 pass; 49999.6 does not).
    """
    if isinstance(paise, bool):
        raise ValueError(f"Invalid minor-unit amount: {paise!r}")
    try:
        value = Decimal(str(paise))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Invalid minor-unit amount: {paise!r}") from exc
    if not value.is_finite() or value != value.to_integral_value():
        raise ValueError(f"Invalid minor-unit amount: {paise!r}")
    return int(value)


def normalize_mobile(phone) -> str:
    """Strip non-digits, keep the last 10 (drops +91 / leading 0)."""
    digits = _NON_DIGITS.sub("", str(phone or ""))
    return digits[-10:]


def with_query_param(url: str, key: str, value: str) -> str:
    parts = urlsplit(url)
    extra = urlencode({key: value})
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def encode_payload(payload: dict) -> str:
    raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def _parse_json(raw: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(raw or "")
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, TimeoutError) or isinstance(
        getattr(exc, "reason", None), TimeoutError
    )


@dataclass(frozen=True)
class PaymentInitiation:
    merchant_transaction_id: str
    redirect_url: str
    raw: dict = field(default_factory=dict, repr=False)


class PhonePeClient:
    """
    Stateless PhonePe pay-API client. Configuration is injected.
    """

    def __init__(self, config: PhonePeConfig):
        self.config = config

    # -------------------------
    # Payload
    # -------------------------
    def build_payload(self, *, merchant_transaction_id: str, amount, user_id, mobile) -> dict:
        cfg = self.config
        payload = {
            "merchantId": cfg.merchant_id,
            "merchantTransactionId": merchant_transaction_id,
            "merchantUserId": str(user_id),
            "amount": to_minor_units(amount),
            "redirectUrl": with_query_param(cfg.redirect_url, "mtid", merchant_transaction_id),
            "redirectMode": REDIRECT_MODE,
            "callbackUrl": cfg.callback_url,
            "paymentInstrument": dict(PAY_PAGE_INSTRUMENT),
        }

        mobile_number = normalize_mobile(mobile)
        if len(mobile_number) == 10:
            payload["mobileNumber"] = mobile_number
        return payload

    # -------------------------
    # Pay API
    # -------------------------
    def initiate(self, order, user) -> PaymentInitiation:
        """
        Start a PAY_PAGE transaction for an online order.

        Raises:
        - GatewayConfigError (missing credentials)
        - AmountNotRepresentableError
        - GatewayTimeoutError / GatewayCallError
        """
        cfg = self.config.require()

        mtid = order.merchant_transaction_id
        shipping = order.shipping_address or {}
        payload = self.build_payload(
            merchant_transaction_id=mtid,
            amount=order.total,
            user_id=getattr(user, "id", None) or order.user_id,
            mobile=shipping.get("phone"),
        )

        payload_b64 = encode_payload(payload)
        x_verify = checksum.sign(payload_b64, cfg.salt_key, cfg.salt_index)

        logger.info(
            "PhonePe pay request",
            extra={"merchant_transaction_id": mtid, "amount_paise": payload["amount"]},
        )

        parsed = self._post(payload_b64, x_verify, mtid=mtid)

        data = parsed.get("data") or {}
        redirect_url = (
            ((data.get("instrumentResponse") or {}).get("redirectInfo") or {}).get("url")
            or ""
        )
        redirect_url = str(redirect_url).strip()

        if parsed.get("success") is not True or not redirect_url:
            message = str(parsed.get("message") or "PhonePe did not return a redirect URL")
            logger.warning(
                "PhonePe pay request rejected",
                extra={"merchant_transaction_id": mtid, "code": parsed.get("code")},
            )
            raise GatewayCallError(message, code=str(parsed.get("code") or ""))

        return PaymentInitiation(
            merchant_transaction_id=mtid,
            redirect_url=redirect_url,
            raw=parsed,
        )

    def _post(self, payload_b64: str, x_verify: str, *, mtid: str) -> dict:
        cfg = self.config
        body = json.dumps({"request": payload_b64}).encode("utf-8")

        try:
            req = Request(
                cfg.pay_api_url,
                data=body,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "X-VERIFY": x_verify,
                },
                method="POST",
            )
            with urlopen(req, timeout=cfg.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            raw = ""
            try:
                raw = e.read().decode("utf-8", errors="replace")
            except OSError:
                raw = ""
            parsed = _parse_json(raw) or {}
            message = str(parsed.get("message") or f"PhonePe HTTP {e.code}")
            logger.warning(
                "PhonePe HTTP error",
                extra={"merchant_transaction_id": mtid, "http_status": e.code},
            )
            raise GatewayCallError(
                message, http_status=e.code, code=str(parsed.get("code") or "")
            ) from e
        except (URLError, OSError) as e:
            if _is_timeout(e):
                logger.warning(
                    "PhonePe request timed out",
                    extra={"merchant_transaction_id": mtid, "timeout": cfg.timeout_seconds},
                )
                raise GatewayTimeoutError(
                    f"PhonePe did not respond within {cfg.timeout_seconds}s"
                ) from e
            logger.warning(
                "PhonePe transport error",
                extra={"merchant_transaction_id": mtid, "error": str(e)},
            )
            raise GatewayCallError(f"PhonePe request failed: {e}") from e
        except (http.client.HTTPException, ValueError) as e:
            # Truncated/garbled responses and unusable pay-API URLs.
            logger.warning(
                "PhonePe protocol error",
                extra={"merchant_transaction_id": mtid, "error": repr(e)},
            )
            raise GatewayCallError(f"PhonePe request failed: {e!r}") from e

        parsed = _parse_json(raw)
        if parsed is None:
            raise GatewayCallError("PhonePe returned a non-JSON response")
        return parsed

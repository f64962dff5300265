# payments/config.py

"""
PHONEPE CONFIGURATION

Settings source:
- settings.PAYMENTS["PHONEPE"] (populated from PHONEPE_* env vars in backend/settings/base.py)

Rules:
- Presence is validated right before use (require()), not at import time, so
  cash-only deployments boot without gateway credentials.
- repr() never includes the salt key.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from django.conf import settings

from payments.services.exceptions import GatewayConfigError

REQUIRED_KEYS = (
    "merchant_id",
    "salt_key",
    "salt_index",
    "pay_api_url",
    "redirect_url",
    "callback_url",
)


@dataclass(frozen=True)
class PhonePeConfig:
    merchant_id: str = ""
    salt_key: str = field(default="", repr=False)
    salt_index: str = ""
    pay_api_url: str = ""
    redirect_url: str = ""
    callback_url: str = ""
    timeout_seconds: float = 15.0

    @classmethod
    def from_settings(cls) -> "PhonePeConfig":
        payments = getattr(settings, "PAYMENTS", {}) or {}
        raw = payments.get("PHONEPE") or {}

        return cls(
            merchant_id=str(raw.get("MERCHANT_ID") or "").strip(),
            salt_key=str(raw.get("SALT_KEY") or "").strip(),
            salt_index=str(raw.get("SALT_INDEX") or "").strip(),
            pay_api_url=str(raw.get("PAY_API_URL") or "").strip(),
            redirect_url=str(raw.get("REDIRECT_URL") or "").strip(),
            callback_url=str(raw.get("CALLBACK_URL") or "").strip(),
            timeout_seconds=float(raw.get("TIMEOUT_SECONDS") or 15.0),
        )

    def missing_keys(self) -> list[str]:
        return [name for name in REQUIRED_KEYS if not getattr(self, name)]

    def require(self) -> "PhonePeConfig":
        missing = self.missing_keys()
        if missing:
            raise GatewayConfigError(
                "PhonePe gateway is not configured. Missing: "
                + ", ".join(f"PHONEPE_{name.upper()}" for name in missing)
            )
        return self

    @property
    def is_configured(self) -> bool:
        return not self.missing_keys()

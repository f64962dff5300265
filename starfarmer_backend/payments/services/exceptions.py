# payments/services/exceptions.py

"""
PAYMENT GATEWAY ERRORS

Centralized domain errors for the PhonePe integration.
"""

from __future__ import annotations


class PaymentGatewayError(Exception):
    """Base exception for all payment gateway failures."""


class GatewayConfigError(PaymentGatewayError):
    """Raised when required gateway credentials / URLs are missing."""


class GatewayCallError(PaymentGatewayError):
    """
    Raised when the pay API call fails or returns an unusable response.

    Carries the gateway's message / code and the HTTP status when available.
    """

    def __init__(self, message: str, *, http_status: int | None = None, code: str = ""):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.code = code


class GatewayTimeoutError(GatewayCallError):
    """
    Raised when the pay API call exceeds its timeout.

    The outcome at the gateway is unknown; the callback stays authoritative.
    """


class AmountNotRepresentableError(PaymentGatewayError):
    """Raised when an amount has sub-paise precision."""


class SignatureError(PaymentGatewayError):
    """Raised when an inbound callback fails checksum verification."""


class CallbackPayloadError(PaymentGatewayError):
    """Raised when a verified callback payload cannot be decoded."""

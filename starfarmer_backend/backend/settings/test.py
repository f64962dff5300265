# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite
- locmem email backend (assert on django.core.mail.outbox)
- Notifications dispatched inline with zero backoff
- Gateway credentials are dummies; tests inject their own PhonePeConfig
- Throttling disabled
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
ADMIN_EMAIL = "admin@starfarmer.test"
FRONTEND_URL = "https://shop.test"

NOTIFICATIONS = {
    "ASYNC": False,
    "MAX_ATTEMPTS": 2,
    "BACKOFF_SECONDS": 0.0,
    "MAX_WORKERS": 1,
}

PAYMENTS = {
    "PHONEPE": {
        "MERCHANT_ID": "MERCHANTUAT",
        "SALT_KEY": "test-salt-key",
        "SALT_INDEX": "1",
        "PAY_API_URL": "https://gateway.test/pg/v1/pay",
        "REDIRECT_URL": "https://shop.test/payment-status",
        "CALLBACK_URL": "https://api.shop.test/api/payments/phonepe-callback/",
        "TIMEOUT_SECONDS": 5.0,
    }
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
    "DEFAULT_THROTTLE_RATES": {
        "anon": "10000/min",
        "user": "10000/min",
        "public_write": "10000/min",
        "webhook": "10000/min",
        "password_reset": "10000/min",
    },
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "WARNING"},
}

# backend/settings/prod.py
"""
PATH: backend/settings/prod.py

PRODUCTION SETTINGS

Refuses to boot when anything the storefront cannot run without is missing:
- SECRET_KEY, ALLOWED_HOSTS and a Postgres DATABASE_URL
- PhonePe merchant credentials plus https redirect/callback URLs
- FRONTEND_URL (account emails link back to it) over https
- a real mail transport and an ADMIN_EMAIL for new-order notices

Static assets are served by WhiteNoise behind the TLS-terminating proxy.
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import BASE_DIR, FRONTEND_URL, MIDDLEWARE, PAYMENTS, env

DEBUG = False


def _require(name: str, value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ImproperlyConfigured(f"{name} must be set in production.")
    return value


def _require_https(name: str, value: str) -> str:
    value = _require(name, value)
    if not value.startswith("https://"):
        raise ImproperlyConfigured(f"{name} must be an https:// URL in production.")
    return value


# ----------------------------
# Core
# ----------------------------
SECRET_KEY = _require("SECRET_KEY", env("SECRET_KEY", default=""))
if SECRET_KEY == "dev-insecure-change-me":
    raise ImproperlyConfigured("SECRET_KEY is still the development placeholder.")

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=[])
if not ALLOWED_HOSTS:
    raise ImproperlyConfigured("ALLOWED_HOSTS must be set in production.")

# Orders, payments and stock live in Postgres; row locks are relied on.
_database_url = _require("DATABASE_URL", env("DATABASE_URL", default=""))
if _database_url.startswith("sqlite"):
    raise ImproperlyConfigured("SQLite is not supported in production.")

DATABASES = {"default": env.db("DATABASE_URL")}
DATABASES["default"]["CONN_MAX_AGE"] = env.int("DB_CONN_MAX_AGE", default=60)

# ----------------------------
# PhonePe
# ----------------------------
_phonepe = PAYMENTS["PHONEPE"]
for _key in ("MERCHANT_ID", "SALT_KEY", "SALT_INDEX"):
    _require(f"PHONEPE_{_key}", _phonepe[_key])
for _key in ("PAY_API_URL", "REDIRECT_URL", "CALLBACK_URL"):
    _require_https(f"PHONEPE_{_key}", _phonepe[_key])

_require_https("FRONTEND_URL", FRONTEND_URL)

# ----------------------------
# Static files
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(BASE_DIR / "staticfiles"))

MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"
    },
}

# ----------------------------
# Transport security
# ----------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env.bool("SECURE_SSL_REDIRECT", default=True)
SECURE_HSTS_SECONDS = env.int("SECURE_HSTS_SECONDS", default=3600)
SECURE_HSTS_INCLUDE_SUBDOMAINS = True

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

# ----------------------------
# CORS / CSRF
# ----------------------------
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=[FRONTEND_URL])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=[FRONTEND_URL])

for _origin in [*CORS_ALLOWED_ORIGINS, *CSRF_TRUSTED_ORIGINS]:
    _require_https("CORS/CSRF origin", _origin)

# Bearer tokens only; the browser never sends cookies cross-origin.
CORS_ALLOW_CREDENTIALS = False

# ----------------------------
# Email
# ----------------------------
EMAIL_BACKEND = env(
    "EMAIL_BACKEND", default="django.core.mail.backends.smtp.EmailBackend"
)
if EMAIL_BACKEND.endswith(("console.EmailBackend", "locmem.EmailBackend")):
    raise ImproperlyConfigured(f"{EMAIL_BACKEND} cannot deliver mail in production.")

_require("ADMIN_EMAIL", env("ADMIN_EMAIL", default=""))

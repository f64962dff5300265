# users/services/tokens.py

"""
ACCOUNT TOKENS

Email verification:
- signed + timestamped {"uid", "email"} (django.core.signing)
- valid for EMAIL_VERIFICATION_MAX_AGE seconds (24h)
- bound to the email it was issued for

Password reset:
- Django's PasswordResetTokenGenerator, keyed on uid
- valid for PASSWORD_RESET_TIMEOUT seconds (30 min)
- single use: changing the password invalidates it
"""

from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core import signing
from django.core.exceptions import ValidationError
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from users.services.exceptions import InvalidTokenError

VERIFICATION_SALT = "users.email-verification"


def make_verification_token(user) -> str:
    return signing.dumps({"uid": str(user.pk), "email": user.email}, salt=VERIFICATION_SALT)


def read_verification_token(token: str):
    max_age = getattr(settings, "EMAIL_VERIFICATION_MAX_AGE", 24 * 60 * 60)
    try:
        data = signing.loads(token or "", salt=VERIFICATION_SALT, max_age=max_age)
    except signing.BadSignature as exc:
        # SignatureExpired is a BadSignature
        raise InvalidTokenError("Invalid or expired verification token") from exc

    User = get_user_model()
    try:
        user = User.objects.filter(pk=data.get("uid")).first()
    except ValidationError:
        user = None

    if user is None or user.email.lower() != str(data.get("email") or "").lower():
        raise InvalidTokenError("Invalid or expired verification token")
    return user


def make_password_reset(user) -> tuple[str, str]:
    uid = urlsafe_base64_encode(force_bytes(user.pk))
    return uid, default_token_generator.make_token(user)


def read_password_reset(uid: str, token: str):
    User = get_user_model()
    try:
        pk = force_str(urlsafe_base64_decode(uid or ""))
        user = User.objects.filter(pk=pk).first()
    except (TypeError, ValueError, OverflowError, ValidationError):
        user = None

    if user is None or not default_token_generator.check_token(user, token or ""):
        raise InvalidTokenError("Invalid or expired password reset token")
    return user

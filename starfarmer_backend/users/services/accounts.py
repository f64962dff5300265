# users/services/accounts.py

"""
ACCOUNT FLOWS

- register / login gate on a verified email
- verification link: FRONTEND_URL/verify-email?token=...
- reset link:        FRONTEND_URL/reset-password?uid=...&token=...

Emails go through the notification dispatcher after the surrounding
transaction commits; delivery failures never reach the caller.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from notifications.services.dispatcher import get_dispatcher
from notifications.services.email import (
    send_password_reset_email,
    send_verification_email,
)
from users.services import tokens
from users.services.exceptions import AccountNotFoundError, AlreadyVerifiedError

logger = logging.getLogger(__name__)


def _frontend_link(path: str, **params) -> str:
    base = (getattr(settings, "FRONTEND_URL", "") or "").rstrip("/")
    return f"{base}/{path}?{urlencode(params)}"


def send_verification(user) -> None:
    link = _frontend_link("verify-email", token=tokens.make_verification_token(user))
    email = user.email

    transaction.on_commit(lambda: get_dispatcher().submit(send_verification_email, email, link))
    logger.info("Verification email queued", extra={"user_id": str(user.pk)})


def resend_verification(email: str) -> None:
    User = get_user_model()
    user = User.objects.filter(email__iexact=(email or "").strip()).first()

    if user is None:
        raise AccountNotFoundError("No user found with that email address")
    if user.is_email_verified:
        raise AlreadyVerifiedError("Email is already verified")

    send_verification(user)


def verify_email(token: str):
    user = tokens.read_verification_token(token)
    user.mark_email_verified()
    logger.info("Email verified", extra={"user_id": str(user.pk)})
    return user


def request_password_reset(email: str) -> None:
    """
    Silent for unknown emails so the endpoint cannot be used to enumerate accounts.
    """
    User = get_user_model()
    user = User.objects.filter(email__iexact=(email or "").strip(), is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return

    uid, token = tokens.make_password_reset(user)
    link = _frontend_link("reset-password", uid=uid, token=token)
    address = user.email

    transaction.on_commit(lambda: get_dispatcher().submit(send_password_reset_email, address, link))
    logger.info("Password reset email queued", extra={"user_id": str(user.pk)})


@transaction.atomic
def reset_password(*, uid: str, token: str, password: str):
    user = tokens.read_password_reset(uid, token)
    user.set_password(password)
    # Following the link proves ownership of the mailbox.
    user.is_email_verified = True
    user.save(update_fields=["password", "is_email_verified", "updated_at"])
    logger.info("Password reset", extra={"user_id": str(user.pk)})
    return user

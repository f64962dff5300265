"""
PATH: users/management/commands/ensure_superuser.py

Admin account bootstrap.

- Reads ADMIN_EMAIL (settings) + AUTO_ADMIN_PASSWORD (env).
- Idempotent: creates the admin if missing; promotes + resets password if the user exists.
- Does NOT print the password.
"""

from __future__ import annotations

import os

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from users.models import ROLE_ADMIN


class Command(BaseCommand):
    help = "Create/update the store admin account from ADMIN_EMAIL + AUTO_ADMIN_PASSWORD (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default="", help="Overrides settings.ADMIN_EMAIL")

    def handle(self, *args, **options):
        email = (options.get("email") or getattr(settings, "ADMIN_EMAIL", "") or "").strip()
        password = (os.environ.get("AUTO_ADMIN_PASSWORD") or "").strip()

        if not email or not password:
            self.stdout.write(
                self.style.WARNING("ADMIN_EMAIL / AUTO_ADMIN_PASSWORD not set. Skipping.")
            )
            return

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()

            if user:
                user.role = ROLE_ADMIN
                user.is_active = True
                user.is_staff = True
                user.is_superuser = True
                user.is_email_verified = True
                user.set_password(password)
                user.save()
                self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (updated)"))
                return

            User.objects.create_superuser(email=email, password=password, name="Admin")
            self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (created)"))
